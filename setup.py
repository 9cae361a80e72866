#!/usr/bin/env python3

from setuptools import setup

setup(
    name="securepassgen",
    version="1.0.0",
    description="Secure password generator with strength assessment",
    packages=["securepassgen", "securepassgen.backend"],
    python_requires=">=3.7",
    install_requires=[
        "pynacl",
        "blessed",
        "prompt_toolkit",
        "pyperclip",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "securepassgen=securepassgen.main:main",
        ],
    },
)
