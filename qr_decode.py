#!/usr/bin/env python3
"""
QR Code Block Decoder - Reed-Solomon correction of a symbol's codewords
Usage: python3 qr_decode.py <hex codewords | file> --version=N --level=L|M|Q|H [--debug]
"""

import os
import sys
from typing import List, Tuple, Optional

from galois_field import QR_CODE_FIELD_256
from reed_solomon import ReedSolomonDecoder, ReedSolomonEncoder
from rs_errors import UncorrectableDataError

# Global debug output directory (None = disabled)
DEBUG_DIR = None

EC_LEVELS = 'LMQH'

# version -> per EC level (L, M, Q, H): (EC codewords per block, [(block count, data codewords), ...])
EC_BLOCKS = {
    1: ((7, [(1, 19)]), (10, [(1, 16)]), (13, [(1, 13)]), (17, [(1, 9)])),
    2: ((10, [(1, 34)]), (16, [(1, 28)]), (22, [(1, 22)]), (28, [(1, 16)])),
    3: ((15, [(1, 55)]), (26, [(1, 44)]), (18, [(2, 17)]), (22, [(2, 13)])),
    4: ((20, [(1, 80)]), (18, [(2, 32)]), (26, [(2, 24)]), (16, [(4, 9)])),
    5: ((26, [(1, 108)]), (24, [(2, 43)]), (18, [(2, 15), (2, 16)]), (22, [(2, 11), (2, 12)])),
    6: ((18, [(2, 68)]), (16, [(4, 27)]), (24, [(4, 19)]), (28, [(4, 15)])),
    7: ((20, [(2, 78)]), (18, [(4, 31)]), (18, [(2, 14), (4, 15)]), (26, [(4, 13), (1, 14)])),
    8: ((24, [(2, 97)]), (22, [(2, 38), (2, 39)]), (22, [(4, 18), (2, 19)]), (26, [(4, 14), (2, 15)])),
    9: ((30, [(2, 116)]), (22, [(3, 36), (2, 37)]), (20, [(4, 16), (4, 17)]), (24, [(4, 12), (4, 13)])),
    10: ((18, [(2, 68), (2, 69)]), (26, [(4, 43), (1, 44)]), (24, [(6, 19), (2, 20)]), (28, [(6, 15), (2, 16)])),
    11: ((20, [(4, 81)]), (30, [(1, 50), (4, 51)]), (28, [(4, 22), (4, 23)]), (24, [(3, 12), (8, 13)])),
    12: ((24, [(2, 92), (2, 93)]), (22, [(6, 36), (2, 37)]), (26, [(4, 20), (6, 21)]), (28, [(7, 14), (4, 15)])),
    13: ((26, [(4, 107)]), (22, [(8, 37), (1, 38)]), (24, [(8, 20), (4, 21)]), (22, [(12, 11), (4, 12)])),
    14: ((30, [(3, 115), (1, 116)]), (24, [(4, 40), (5, 41)]), (20, [(11, 16), (5, 17)]), (24, [(11, 12), (5, 13)])),
    15: ((22, [(5, 87), (1, 88)]), (24, [(5, 41), (5, 42)]), (30, [(5, 24), (7, 25)]), (24, [(11, 12), (7, 13)])),
    16: ((24, [(5, 98), (1, 99)]), (28, [(7, 45), (3, 46)]), (24, [(15, 19), (2, 20)]), (30, [(3, 15), (13, 16)])),
    17: ((28, [(1, 107), (5, 108)]), (28, [(10, 46), (1, 47)]), (28, [(1, 22), (15, 23)]), (28, [(2, 14), (17, 15)])),
    18: ((30, [(5, 120), (1, 121)]), (26, [(9, 43), (4, 44)]), (28, [(17, 22), (1, 23)]), (28, [(2, 14), (19, 15)])),
    19: ((28, [(3, 113), (4, 114)]), (26, [(3, 44), (11, 45)]), (26, [(17, 21), (4, 22)]), (26, [(9, 13), (16, 14)])),
    20: ((28, [(3, 107), (5, 108)]), (26, [(3, 41), (13, 42)]), (30, [(15, 24), (5, 25)]), (28, [(15, 15), (10, 16)])),
    21: ((28, [(4, 116), (4, 117)]), (26, [(17, 42)]), (28, [(17, 22), (6, 23)]), (30, [(19, 16), (6, 17)])),
    22: ((28, [(2, 111), (7, 112)]), (28, [(17, 46)]), (30, [(7, 24), (16, 25)]), (24, [(34, 13)])),
    23: ((30, [(4, 121), (5, 122)]), (28, [(4, 47), (14, 48)]), (30, [(11, 24), (14, 25)]), (30, [(16, 15), (14, 16)])),
    24: ((30, [(6, 117), (4, 118)]), (28, [(6, 45), (14, 46)]), (30, [(11, 24), (16, 25)]), (30, [(30, 16), (2, 17)])),
    25: ((26, [(8, 106), (4, 107)]), (28, [(8, 47), (13, 48)]), (30, [(7, 24), (22, 25)]), (30, [(22, 15), (13, 16)])),
    26: ((28, [(10, 114), (2, 115)]), (28, [(19, 46), (4, 47)]), (28, [(28, 22), (6, 23)]), (30, [(33, 16), (4, 17)])),
    27: ((30, [(8, 122), (4, 123)]), (28, [(22, 45), (3, 46)]), (30, [(8, 23), (26, 24)]), (30, [(12, 15), (28, 16)])),
    28: ((30, [(3, 117), (10, 118)]), (28, [(3, 45), (23, 46)]), (30, [(4, 24), (31, 25)]), (30, [(11, 15), (31, 16)])),
    29: ((30, [(7, 116), (7, 117)]), (28, [(21, 45), (7, 46)]), (30, [(1, 23), (37, 24)]), (30, [(19, 15), (26, 16)])),
    30: ((30, [(5, 115), (10, 116)]), (28, [(19, 47), (10, 48)]), (30, [(15, 24), (25, 25)]), (30, [(23, 15), (25, 16)])),
    31: ((30, [(13, 115), (3, 116)]), (28, [(2, 46), (29, 47)]), (30, [(42, 24), (1, 25)]), (30, [(23, 15), (28, 16)])),
    32: ((30, [(17, 115)]), (28, [(10, 46), (23, 47)]), (30, [(10, 24), (35, 25)]), (30, [(19, 15), (35, 16)])),
    33: ((30, [(17, 115), (1, 116)]), (28, [(14, 46), (21, 47)]), (30, [(29, 24), (19, 25)]), (30, [(11, 15), (46, 16)])),
    34: ((30, [(13, 115), (6, 116)]), (28, [(14, 46), (23, 47)]), (30, [(44, 24), (7, 25)]), (30, [(59, 16), (1, 17)])),
    35: ((30, [(12, 121), (7, 122)]), (28, [(12, 47), (26, 48)]), (30, [(39, 24), (14, 25)]), (30, [(22, 15), (41, 16)])),
    36: ((30, [(6, 121), (14, 122)]), (28, [(6, 47), (34, 48)]), (30, [(46, 24), (10, 25)]), (30, [(2, 15), (64, 16)])),
    37: ((30, [(17, 122), (4, 123)]), (28, [(29, 46), (14, 47)]), (30, [(49, 24), (10, 25)]), (30, [(24, 15), (46, 16)])),
    38: ((30, [(4, 122), (18, 123)]), (28, [(13, 46), (32, 47)]), (30, [(48, 24), (14, 25)]), (30, [(42, 15), (32, 16)])),
    39: ((30, [(20, 117), (4, 118)]), (28, [(40, 47), (7, 48)]), (30, [(43, 24), (22, 25)]), (30, [(10, 15), (67, 16)])),
    40: ((30, [(19, 118), (6, 119)]), (28, [(18, 47), (31, 48)]), (30, [(34, 24), (34, 25)]), (30, [(20, 15), (61, 16)])),
}

_decoder = ReedSolomonDecoder(QR_CODE_FIELD_256)
_encoder = ReedSolomonEncoder(QR_CODE_FIELD_256)


def get_block_layout(version: int, level: str) -> List[Tuple[int, int]]:
    """[(data_bytes, total_bytes), ...] for every block of the symbol, in order."""
    level = str(level).upper()
    if version not in EC_BLOCKS or level not in EC_LEVELS or len(level) != 1:
        raise ValueError(f"Unsupported version {version} / EC {level}")
    ec_per_block, groups = EC_BLOCKS[version][EC_LEVELS.index(level)]
    return [(data, data + ec_per_block) for count, data in groups for _ in range(count)]


def split_blocks(codewords, version: int, level: str) -> List[List[int]]:
    """De-interleave a symbol's codewords into per-block buffers (data then EC)."""
    blocks = get_block_layout(version, level)
    expected = sum(total for _, total in blocks)
    if len(codewords) != expected:
        raise ValueError(f"Version {version}-{level} has {expected} codewords, got {len(codewords)}")

    block_data, block_ec = [[] for _ in blocks], [[] for _ in blocks]
    idx, max_data, ec_len = 0, max(b[0] for b in blocks), blocks[0][1] - blocks[0][0]
    for col in range(max_data):
        for i, (data_len, _) in enumerate(blocks):
            if col < data_len:
                block_data[i].append(int(codewords[idx]))
                idx += 1
    for col in range(ec_len):
        for i in range(len(blocks)):
            block_ec[i].append(int(codewords[idx]))
            idx += 1
    return [d + e for d, e in zip(block_data, block_ec)]


def interleave_blocks(blocks: List[List[int]], version: int, level: str) -> List[int]:
    """Inverse of split_blocks."""
    layout = get_block_layout(version, level)
    if [len(b) for b in blocks] != [total for _, total in layout]:
        raise ValueError(f"Block sizes do not match version {version}-{level}")
    max_data, ec_len = max(d for d, _ in layout), layout[0][1] - layout[0][0]
    result = []
    for col in range(max_data):
        for block, (data_len, _) in zip(blocks, layout):
            if col < data_len:
                result.append(block[col])
    for col in range(ec_len):
        for block, (data_len, _) in zip(blocks, layout):
            result.append(block[data_len + col])
    return result


def correct_blocks(codewords, version: int, level: str,
                   decoder: Optional[ReedSolomonDecoder] = None):
    """Correct every block of a symbol.

    Returns (data_codewords, rs_info). A block that cannot be corrected keeps
    its raw data codewords and is marked failed in rs_info.
    """
    decoder = decoder or _decoder
    layout = get_block_layout(version, level)
    data, rs_info = [], []
    for i, (block, (data_len, total)) in enumerate(zip(split_blocks(codewords, version, level), layout)):
        ec_len = total - data_len
        try:
            errors = decoder.decode(block, ec_len)
            rs_info.append({'block': i, 'data_len': data_len, 'ec_len': ec_len,
                            'errors': errors, 'status': 'ok'})
        except UncorrectableDataError as e:
            rs_info.append({'block': i, 'data_len': data_len, 'ec_len': ec_len,
                            'errors': '?', 'status': f'failed: {e}'})
        data.extend(block[:data_len])
    return data, rs_info


def build_codewords(data, version: int, level: str,
                    encoder: Optional[ReedSolomonEncoder] = None) -> List[int]:
    """Split data codewords into blocks, append EC codewords and interleave."""
    encoder = encoder or _encoder
    layout = get_block_layout(version, level)
    if len(data) != sum(d for d, _ in layout):
        raise ValueError(f"Version {version}-{level} holds {sum(d for d, _ in layout)} data codewords, got {len(data)}")
    blocks, idx = [], 0
    for data_len, total in layout:
        block = list(data[idx:idx + data_len]) + [0] * (total - data_len)
        encoder.encode(block, total - data_len)
        blocks.append(block)
        idx += data_len
    return interleave_blocks(blocks, version, level)


def parse_hex(text: str) -> List[int]:
    """'10 20 0c' or '10200c' -> [0x10, 0x20, 0x0c]"""
    digits = ''.join(text.split())
    if len(digits) % 2:
        raise ValueError("Odd number of hex digits")
    return list(bytes.fromhex(digits))


# ============================================================================
# MAIN
# ============================================================================

def main(argv=None):
    global DEBUG_DIR
    DEBUG_DIR = None
    argv = sys.argv[1:] if argv is None else argv
    args = [a for a in argv if not a.startswith('--')]
    flags = dict(a[2:].split('=', 1) if '=' in a else (a[2:], '') for a in argv if a.startswith('--'))
    if not args:
        print(__doc__.strip())
        return 1

    source = args[0]
    try:
        if os.path.isfile(source):
            with open(source) as f:
                codewords = parse_hex(f.read())
        else:
            codewords = parse_hex(' '.join(args))
        version, level = int(flags.get('version', 1)), flags.get('level', 'M')
        layout = get_block_layout(version, level)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if 'debug' in flags:
        base = os.path.splitext(os.path.basename(source))[0] if os.path.isfile(source) else 'codewords'
        DEBUG_DIR = os.path.join(os.path.dirname(source) if os.path.isfile(source) else '.', f"{base}_debug")
        os.makedirs(DEBUG_DIR, exist_ok=True)
        print(f"Debug output -> {DEBUG_DIR}/")

    print(f"Version: {version}, RS level: {level.upper()}, {len(layout)} block(s)")
    try:
        data, rs_info = correct_blocks(codewords, version, level)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    for info in rs_info:
        print(f"  Block {info['block']}: {info['data_len']}+{info['ec_len']} -> {info['status']}"
              f" ({info['errors']} corrected)")
    print(bytes(data).hex(' '))

    if DEBUG_DIR:
        from qr_debug import save_debug_all
        save_debug_all(DEBUG_DIR, codewords, build_codewords(data, version, level),
                       rs_info, version, level)
    return 0 if all(info['status'] == 'ok' for info in rs_info) else 1


if __name__ == "__main__":
    sys.exit(main())
