#!/usr/bin/env python3
"""Yeni VAPID anahtar çifti üretir ve .env satırları olarak yazdırır.
   Kullanım: python3 scripts/generate_vapid_keys.py >> .env
   Anahtar değişince süreç yeniden başlatılmalı; mevcut abonelikler geçerli kalır."""
from cryptography.hazmat.primitives import serialization
from py_vapid import Vapid
from py_vapid.utils import b64urlencode


def generate() -> dict[str, str]:
    vapid = Vapid()
    vapid.generate_keys()
    public_raw = vapid.public_key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.UncompressedPoint,
    )
    private_raw = vapid.private_key.private_numbers().private_value.to_bytes(32, "big")
    return {
        "VAPID_PUBLIC_KEY": b64urlencode(public_raw),
        "VAPID_PRIVATE_KEY": b64urlencode(private_raw),
    }


def main():
    for name, value in generate().items():
        print(f"{name}={value}")


if __name__ == "__main__":
    main()
