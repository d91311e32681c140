#!/usr/bin/env python3
"""Bildirim icon/badge için 192x192 ve 512x512 PNG üretir (NCX mor #7c3aed).
   Proje kökünden: python3 scripts/generate_pwa_icons.py  -> static/icons/icon-192.png (sw.js bunu kullanır)"""
import struct
import zlib
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
ICONS = ROOT / "static" / "icons"
R, G, B = 0x7C, 0x3A, 0xED


def png_chunk(chunk_type: bytes, data: bytes) -> bytes:
    chunk = chunk_type + data
    return struct.pack(">I", len(data)) + chunk + struct.pack(">I", zlib.crc32(chunk) & 0xFFFFFFFF)


def make_solid_png(w: int, h: int) -> bytes:
    row = b"\x00" + bytes((R, G, B)) * w  # filter byte + pikseller
    z = zlib.compress(row * h, 9)
    ihdr = struct.pack(">IIBBBBB", w, h, 8, 2, 0, 0, 0)
    header = b"\x89PNG\r\n\x1a\n"
    return header + png_chunk(b"IHDR", ihdr) + png_chunk(b"IDAT", z) + png_chunk(b"IEND", b"")


def main():
    ICONS.mkdir(parents=True, exist_ok=True)
    for size in (192, 512):
        out = ICONS / f"icon-{size}.png"
        out.write_bytes(make_solid_png(size, size))
        print(f"Yazıldı: {out} ({size}x{size})")


if __name__ == "__main__":
    main()
