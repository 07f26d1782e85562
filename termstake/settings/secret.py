from cryptography.fernet import Fernet

from .main import env

MASTER_KEY = env('MASTERKEY').encode('ascii')


# Secret Management
def decrypt_string(s):
    """Decrypt a Fernet token with the master key; plain values pass through when no key is set."""
    if not s or not MASTER_KEY:
        return s
    f = Fernet(MASTER_KEY)
    return f.decrypt(s.encode('ascii')).decode('ascii')


def encrypt_string(s):
    if not MASTER_KEY:
        return s
    f = Fernet(MASTER_KEY)
    return f.encrypt(s.encode('ascii')).decode('ascii')


SECRET_KEY = decrypt_string(env.str('SECRET_KEY'))

# Hex encoded Ed25519 seed of the staking pool wallet
SETTLEMENT_PRIVATE_KEY = decrypt_string(env.str('SETTLEMENT_PRIVATE_KEY', default=''))
