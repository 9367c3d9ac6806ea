"""Issue a self-signed server certificate to local files.

Generates the same material the rotation job writes into the secret (random
16 hex character CN, P-256 key, 100 day validity) without touching a cluster.
By default it writes `{out}.key` and `{out}.crt` where `out` is the path
prefix supplied via `--out` (example: `--out certs/server` -> `certs/server.key`, `certs/server.crt`).

Example:
	python scripts/gen_cert.py --out certs/server
"""

import argparse
import os
import sys

from tlsrotate.common.errors import RotationError
from tlsrotate.crypto.identity import generate_identity
from tlsrotate.crypto.issuer import issue_certificate


def main():
	parser = argparse.ArgumentParser(description="Issue a self-signed server certificate")
	parser.add_argument("--out", required=True, help="Output path prefix (e.g. certs/server)")
	args = parser.parse_args()

	# ensure output dir exists
	outdir = os.path.dirname(args.out)
	if outdir:
		os.makedirs(outdir, exist_ok=True)

	try:
		identity = generate_identity()
		issued = issue_certificate(identity.subject_name, identity.private_key)
	except RotationError as e:
		print(f"{e.stage} failed: {e}", file=sys.stderr)
		return 1

	key_path = f"{args.out}.key"
	cert_path = f"{args.out}.crt"

	with open(key_path, "wb") as f:
		f.write(issued.key_pem)
	os.chmod(key_path, 0o600)

	with open(cert_path, "wb") as f:
		f.write(issued.cert_pem)

	print(f"CN: {issued.subject_name}")
	print(f"Wrote key: {key_path}")
	print(f"Wrote cert: {cert_path}")
	return 0


if __name__ == "__main__":
	sys.exit(main())
