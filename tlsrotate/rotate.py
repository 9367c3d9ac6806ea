"""Rotate the self-signed TLS certificate held in a Kubernetes secret.

One run: fetch the secret, generate a random subject name and P-256 key,
issue a self-signed server certificate, write `tls.crt` / `tls.key` into
the secret (other keys are kept) and replace it by name. Any failure
aborts before the update is sent.

Example:
    python -m tlsrotate.rotate --secName foobar-tls --namespace default
"""

import argparse
import logging
import os
import sys
from datetime import datetime
from typing import List, Optional

from .common.config import RotateConfig, build_config
from .common.errors import EncodingError, RotationError
from .common.models import IssuedCertificate
from .common.utils import RandomSource
from .crypto.identity import generate_identity
from .crypto.issuer import issue_certificate
from .crypto.pki import verify_key_pair
from .storage.secrets import KubernetesSecretStore, SecretStore

logger = logging.getLogger("tlsrotate")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def rotate_secret(
    store: SecretStore,
    secret_name: str,
    random_source: RandomSource = os.urandom,
    now: Optional[datetime] = None,
    dry_run: bool = False,
) -> IssuedCertificate:
    """Issue a new certificate and write it into `secret_name`.

    Raises the RotationError subclass for the first failing stage. The
    store's update is only called once every generation step succeeded.
    """
    record = store.fetch(secret_name)

    identity = generate_identity(random_source)
    issued = issue_certificate(identity.subject_name, identity.private_key, random_source, now)

    try:
        matched = verify_key_pair(issued.cert_pem, issued.key_pem)
    except (ValueError, TypeError) as e:
        raise EncodingError("issued PEM material does not parse") from e
    if not matched:
        raise EncodingError("issued private key does not match certificate")

    record.set_tls(issued)
    if dry_run:
        logger.debug("dry run: not updating secret %s", secret_name)
        return issued

    store.update(secret_name, record)
    return issued


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rotate the self-signed TLS certificate in a Kubernetes secret")
    parser.add_argument("--secName", dest="secret_name", help="secret name to be updating (default: foobar-tls)")
    parser.add_argument("--namespace", help="namespace of the secret (default: default)")
    parser.add_argument("--kubeconfig", help="kubeconfig to use outside the cluster")
    parser.add_argument("--log-level", help="logging level (default: INFO)")
    parser.add_argument("--dry-run", action="store_true", default=None, help="generate but do not update the secret")
    return parser.parse_args(argv)


def run(
    cfg: RotateConfig,
    store: Optional[SecretStore] = None,
    random_source: RandomSource = os.urandom,
) -> int:
    """Rotate using `cfg`; returns the process exit status."""
    try:
        if store is None:
            store = KubernetesSecretStore.from_kube_config(cfg.namespace, cfg.kubeconfig)
        issued = rotate_secret(store, cfg.secret_name, random_source, dry_run=cfg.dry_run)
    except RotationError as e:
        logger.error("%s failed: %s", e.stage, e)
        return 1

    if cfg.dry_run:
        logger.info("issued cert for domain %s (secret not updated)", issued.subject_name)
    else:
        logger.info("updated cert secret with domain %s", issued.subject_name)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        cfg = build_config(
            secret_name=args.secret_name,
            namespace=args.namespace,
            kubeconfig=args.kubeconfig,
            log_level=args.log_level,
            dry_run=args.dry_run,
        )
    except RotationError as e:
        logging.basicConfig(format=LOG_FORMAT)
        logger.error("%s failed: %s", e.stage, e)
        return 1

    logging.basicConfig(level=cfg.log_level, format=LOG_FORMAT)
    return run(cfg)


if __name__ == "__main__":
    sys.exit(main())
