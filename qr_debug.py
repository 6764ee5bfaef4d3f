"""QR block correction debug output - saves a codeword map and report to disk."""

import cv2
import numpy as np
import os

from qr_decode import split_blocks


def _save_img(debug_dir, name, data, scale=None):
    """Save image to debug_dir, enlarging small maps with nearest-neighbour."""
    path = os.path.join(debug_dir, name)
    if scale:
        data = cv2.resize(data, (data.shape[1]*scale, data.shape[0]*scale),
                          interpolation=cv2.INTER_NEAREST)
    cv2.imwrite(path, data)
    return path


def codeword_map(raw_blocks, fixed_blocks, rs_info):
    """One row per block, one cell per codeword. Returns a BGR uint8 image.

    Gray level = received byte value. Cells the decoder changed are red,
    blocks that failed are tinted blue, unused cells of short blocks stay black.
    """
    width = max(len(b) for b in raw_blocks)
    img = np.zeros((len(raw_blocks), width, 3), dtype=np.uint8)
    for row, (raw, fixed, info) in enumerate(zip(raw_blocks, fixed_blocks, rs_info)):
        values = np.array(raw, dtype=np.uint8)
        img[row, :len(raw)] = values[:, None]
        if info['status'] != 'ok':
            img[row, :len(raw), 0] = 255
            continue
        changed = np.flatnonzero(np.array(raw) != np.array(fixed))
        img[row, changed] = (0, 0, 255)
    return img


def format_report(version, level, rs_info, raw_blocks, fixed_blocks):
    lines = [f"Version {version}-{str(level).upper()}, {len(rs_info)} block(s)"]
    for raw, fixed, info in zip(raw_blocks, fixed_blocks, rs_info):
        lines.append(f"block {info['block']}: data={info['data_len']} ec={info['ec_len']} "
                     f"errors={info['errors']} status={info['status']}")
        if info['status'] == 'ok':
            for pos, (a, b) in enumerate(zip(raw, fixed)):
                if a != b:
                    lines.append(f"    [{pos:3d}] {a:02x} -> {b:02x}")
    return '\n'.join(lines) + '\n'


def save_debug_all(debug_dir, codewords, corrected, rs_info, version, level):
    """Write codewords.png and report.txt for one block-correction run."""
    os.makedirs(debug_dir, exist_ok=True)
    raw_blocks = split_blocks(codewords, version, level)
    fixed_blocks = split_blocks(corrected, version, level)

    _save_img(debug_dir, 'codewords.png', codeword_map(raw_blocks, fixed_blocks, rs_info), scale=10)
    with open(os.path.join(debug_dir, 'report.txt'), 'w') as f:
        f.write(format_report(version, level, rs_info, raw_blocks, fixed_blocks))
    print(f"  Debug: {len(rs_info)} block(s) -> {debug_dir}/")
