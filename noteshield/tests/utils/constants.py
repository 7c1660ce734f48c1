PASSPHRASE = "correct horse battery staple"

NOT_A_KEY = """-----BEGIN PGP PUBLIC KEY BLOCK-----

not base64 at all
-----END PGP PUBLIC KEY BLOCK-----
"""

FINGERPRINT = "0123456789ABCDEF0123456789ABCDEF01234567"
