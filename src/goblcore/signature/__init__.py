from .ecdsa import ALGORITHM, EcdsaSigner

__all__ = ["ALGORITHM", "EcdsaSigner"]
