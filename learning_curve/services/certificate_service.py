from __future__ import annotations

import logging
import secrets
import string
import time

from learning_curve.models.progress import Certificate
from learning_curve.repos.catalog_repo import CatalogRepo
from learning_curve.repos.progress_repo import ProgressRepo

logger = logging.getLogger(__name__)

_ALPHABET = string.ascii_uppercase + string.digits


class CertificateNotEligibleError(ValueError):
    pass


def new_certificate_number(now_ms: int | None = None) -> str:
    """ALC-<epoch ms>-<8 upper-case alphanumerics>."""
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(8))
    return f"ALC-{ms}-{suffix}"


async def issue_certificate(
    catalog: CatalogRepo, progress: ProgressRepo, user_id: int, path_id: int
) -> tuple[Certificate, bool]:
    """Issue the path certificate once every published module is completed.

    Returns (certificate, created); a second call returns the existing one.
    """
    existing = await progress.get_certificate(user_id, path_id)
    if existing is not None:
        return existing, False

    modules = await catalog.list_modules(path_id)
    for module in modules:
        completion = await progress.get_completion(user_id, module.id)
        if completion is None or not completion.is_completed:
            raise CertificateNotEligibleError("Not all modules completed")

    try:
        certificate = await progress.add_certificate(
            user_id=user_id,
            path_id=path_id,
            certificate_number=new_certificate_number(),
            issued_at=int(time.time()),
        )
    except ValueError:
        # A concurrent request issued it first.
        certificate = await progress.get_certificate(user_id, path_id)
        if certificate is None:
            raise
        return certificate, False

    logger.info(
        "Certificate issued user_id=%d path_id=%d number=%s",
        user_id,
        path_id,
        certificate.certificate_number,
    )
    return certificate, True
