# write_file, save_file, secure_delete
# (export of generated passwords)
#

import os
import csv
import json
import time

FILE_FORMATS = ('text', 'csv', 'json')

CSV_COLUMNS = ('Index', 'Timestamp', 'Password', 'Length', 'Entropy',
               'Strength', 'StrengthScore')

APPLICATION = 'securepassgen'

#: Byte pairs used for overwrite passes, one pair per pass
WIPE_PATTERNS = (
    b'\x00\x00',
    b'\xff\xff',
    b'\xaa\x55',
    b'\x55\xaa',
    b'\x92\x49',
    b'\x49\x24',
    b'\x24\x92',
    b'\x00\x00',
)


def timestamp() -> str:
    return time.strftime('%F %T')


def write_text(stream, results, include_metadata=True):
    """Write passwords one per line, optionally with metadata."""
    if not include_metadata:
        for result in results:
            stream.write(result.password + '\n')
        return
    stream.write("=== Password List ===\n")
    stream.write(f"Generated: {timestamp()}\n")
    stream.write(f"Count: {len(results)} passwords\n")
    stream.write("=====================\n\n")
    for n, result in enumerate(results, 1):
        stream.write(f"[{n:03d}] {result.password}\n")
        stream.write(f"    Length: {result.length}, Entropy: {result.entropy:.1f} bits, "
                     f"Strength: {result.strength} ({result.score}/100)\n\n")


def write_csv(stream, results):
    """Write header and one row per password.

    Text fields are always quoted, numbers never.

    """
    writer = csv.writer(stream, quoting=csv.QUOTE_NONNUMERIC, lineterminator='\n')
    writer.writerow(CSV_COLUMNS)
    for n, result in enumerate(results, 1):
        writer.writerow((n, timestamp(), result.password, result.length,
                         round(result.entropy, 1), result.strength, result.score))


def write_json(stream, results):
    document = {
        'metadata': {
            'generated': timestamp(),
            'count': len(results),
            'application': APPLICATION,
        },
        'passwords': [
            {
                'index': n,
                'password': result.password,
                'length': result.length,
                'entropy': round(result.entropy, 1),
                'strength': result.strength,
                'strengthScore': result.score,
            }
            for n, result in enumerate(results, 1)
        ],
    }
    json.dump(document, stream, indent=2)
    stream.write('\n')


def write_file(stream, results, file_format='text'):
    if file_format == 'text':
        write_text(stream, results)
    elif file_format == 'csv':
        write_csv(stream, results)
    elif file_format == 'json':
        write_json(stream, results)
    else:
        raise ValueError(f"Unknown file format: {file_format!r}")


def save_file(filename, results, file_format='text'):
    """Write `results` to `filename`, readable only by the owner.

    An existing file is truncated and its mode reset to 0600
    before anything is written.

    """
    fd = os.open(filename, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    try:
        if hasattr(os, 'fchmod'):
            os.fchmod(fd, 0o600)
        f = open(fd, 'w', encoding='utf-8', newline='')
    except Exception:
        os.close(fd)
        raise
    with f:
        write_file(f, results, file_format)


def secure_delete(filename, passes=3):
    """Overwrite file content `passes` times, then unlink it.

    At most len(WIPE_PATTERNS) passes are made. Note that this gives
    no guarantee on journaling or copy-on-write file systems.

    """
    if passes <= 0:
        raise ValueError("Number of passes must be positive")
    passes = min(passes, len(WIPE_PATTERNS))
    with open(filename, 'r+b') as f:
        size = os.fstat(f.fileno()).st_size
        for pattern in WIPE_PATTERNS[:passes]:
            if not size:
                break
            f.seek(0)
            f.write((pattern * (size // 2 + 1))[:size])
            f.flush()
            os.fsync(f.fileno())
    os.unlink(filename)
