"""
Gera um par de chaves VAPID para Web Push.

Uso: python scripts/gerar_chaves_vapid.py
Copie as duas linhas impressas para o .env (VAPID_PUBLIC_KEY / VAPID_PRIVATE_KEY).
"""
from cryptography.hazmat.primitives import serialization
from py_vapid import Vapid
from py_vapid.utils import b64urlencode


def gerar_chaves():
    vapid = Vapid()
    vapid.generate_keys()
    publica = vapid.public_key.public_bytes(
        serialization.Encoding.X962, serialization.PublicFormat.UncompressedPoint
    )
    privada = vapid.private_key.private_numbers().private_value.to_bytes(32, "big")
    return b64urlencode(publica), b64urlencode(privada)


if __name__ == "__main__":
    publica, privada = gerar_chaves()
    print("\nAdicione ao .env:\n")
    print(f"VAPID_PUBLIC_KEY={publica}")
    print(f"VAPID_PRIVATE_KEY={privada}")
    print()
