"""Path completion certificates.

Issuing is idempotent: the first successful POST creates the
certificate and returns 201, later ones return the same certificate
with 200.  Verification is public so a certificate number can be
checked by anyone it is shown to.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel

from learning_curve.api.dependencies import Repos, get_repos, require_user
from learning_curve.models.principal import Principal
from learning_curve.models.progress import Certificate
from learning_curve.services import certificate_service
from learning_curve.services.certificate_service import CertificateNotEligibleError

router = APIRouter(prefix="/v1/certificates", tags=["certificates"])


class CertificateOut(BaseModel):
    id: int
    pathId: int
    certificateNumber: str
    issuedAt: int


class VerifyOut(BaseModel):
    valid: bool
    certificate: CertificateOut | None = None
    userName: str | None = None
    pathTitle: str | None = None


def _certificate_out(c: Certificate) -> CertificateOut:
    return CertificateOut(
        id=c.id, pathId=c.path_id, certificateNumber=c.certificate_number, issuedAt=c.issued_at
    )


@router.post("/{path_id}", response_model=CertificateOut)
async def issue(
    path_id: int,
    response: Response,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> CertificateOut:
    if await repos.catalog.get_path(path_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Learning path not found"},
        )
    try:
        certificate, created = await certificate_service.issue_certificate(
            repos.catalog, repos.progress, principal.user_id, path_id
        )
    except CertificateNotEligibleError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(e)},
        ) from None

    if created:
        response.status_code = status.HTTP_201_CREATED
    return _certificate_out(certificate)


@router.get("/verify/{number}", response_model=VerifyOut)
async def verify(number: str, repos: Annotated[Repos, Depends(get_repos)]) -> VerifyOut:
    certificate = await repos.progress.get_certificate_by_number(number)
    if certificate is None:
        return VerifyOut(valid=False)

    user = await repos.users.get_by_id(certificate.user_id)
    path = await repos.catalog.get_path(certificate.path_id)
    return VerifyOut(
        valid=True,
        certificate=_certificate_out(certificate),
        userName=user.name if user else "Unknown",
        pathTitle=path.title if path else "Unknown",
    )


@router.get("/{path_id}", response_model=CertificateOut)
async def get_for_path(
    path_id: int,
    principal: Annotated[Principal, Depends(require_user)],
    repos: Annotated[Repos, Depends(get_repos)],
) -> CertificateOut:
    certificate = await repos.progress.get_certificate(principal.user_id, path_id)
    if certificate is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": "Certificate not found"},
        )
    return _certificate_out(certificate)
