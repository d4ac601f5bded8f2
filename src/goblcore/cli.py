from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from goblcore.common.canonical_json import canonical_dumps_str, default_dumps_str
from goblcore.common.errors import GoblError
from goblcore.common.hashing import DEFAULT_ALGORITHM
from goblcore.config import GoblConfig, load_config
from goblcore.envelope import Gobl
from goblcore.keys import EcKeypair, load_private_key, load_public_key

logger = logging.getLogger("goblcore")


def _gobl(args: argparse.Namespace) -> Gobl:
    config = load_config(Path(args.config)) if getattr(args, "config", None) else GoblConfig()
    return Gobl(config)


def _emit(text: str, out: str | None) -> None:
    if out:
        Path(out).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


def _cmd_canonicalize(args: argparse.Namespace) -> int:
    print(canonical_dumps_str(Path(args.file).read_bytes()))
    return 0


def _cmd_digest(args: argparse.Namespace) -> int:
    print(_gobl(args).digest(Path(args.file).read_bytes(), args.alg))
    return 0


def _cmd_sign(args: argparse.Namespace) -> int:
    gobl = _gobl(args)
    private_key = load_private_key(Path(args.key))
    envelope = gobl.sign_file(Path(args.file), private_key, args.kid, doc_schema=args.schema)
    _emit(gobl.dumps(envelope), args.out)
    return 0


def _cmd_verify(args: argparse.Namespace) -> int:
    gobl = _gobl(args)
    public_key = load_public_key(Path(args.key))
    document = gobl.extract_from_file(Path(args.envelope), public_key=public_key)
    if args.out:
        _emit(default_dumps_str(document), args.out)
    print("OK: envelope verified")
    return 0


def _cmd_extract(args: argparse.Namespace) -> int:
    document = _gobl(args).extract_unverified(Path(args.envelope))
    _emit(default_dumps_str(document), args.out)
    return 0


def _cmd_keygen(args: argparse.Namespace) -> int:
    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    keypair = EcKeypair.generate()
    private_path = out_dir / f"{args.name}.jwk"
    public_path = out_dir / f"{args.name}.pub.jwk"
    private_path.write_text(json.dumps(keypair.private_jwk(kid=args.kid), indent=2), encoding="utf-8")
    public_path.write_text(json.dumps(keypair.public_jwk(kid=args.kid), indent=2), encoding="utf-8")
    print(private_path)
    print(public_path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="goblcore")
    p.add_argument("-v", "--verbose", action="store_true", help="Log verification details")
    sub = p.add_subparsers(dest="cmd", required=True)

    canon = sub.add_parser("canonicalize", help="Print the canonical JSON form of a file")
    canon.add_argument("file")
    canon.set_defaults(func=_cmd_canonicalize)

    dig = sub.add_parser("digest", help="Digest the canonical form of a document")
    dig.add_argument("file")
    dig.add_argument("--alg", default=DEFAULT_ALGORITHM, help="md5, sha1, sha256, sha384 or sha512")
    dig.set_defaults(func=_cmd_digest)

    sign = sub.add_parser("sign", help="Sign a JSON document into an envelope")
    sign.add_argument("file")
    sign.add_argument("--key", required=True, help="P-256 private key (PEM or JWK)")
    sign.add_argument("--kid", required=True, help="Key identifier put in the token header")
    sign.add_argument("--schema", default=None, help="Document schema URI")
    sign.add_argument("--config", default=None, help="Path to GoblConfig JSON")
    sign.add_argument("--out", default=None)
    sign.set_defaults(func=_cmd_sign)

    verify = sub.add_parser("verify", help="Verify an envelope signature and digest")
    verify.add_argument("envelope")
    verify.add_argument("--key", required=True, help="P-256 public key (PEM or JWK)")
    verify.add_argument("--config", default=None, help="Path to GoblConfig JSON")
    verify.add_argument("--out", default=None, help="Write the verified document here")
    verify.set_defaults(func=_cmd_verify)

    extract = sub.add_parser("extract", help="Print the document of an envelope WITHOUT verification")
    extract.add_argument("envelope")
    extract.add_argument("--out", default=None)
    extract.set_defaults(func=_cmd_extract)

    keygen = sub.add_parser("keygen", help="Write a fresh P-256 key pair as JWK files")
    keygen.add_argument("--out-dir", required=True)
    keygen.add_argument("--name", default="id_es256")
    keygen.add_argument("--kid", default=None)
    keygen.set_defaults(func=_cmd_keygen)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (GoblError, ValueError) as exc:
        logger.debug("command failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
