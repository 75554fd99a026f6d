# app/api/routes.py
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from agents.analysis_agent import analyze_pillar
from app.exceptions import AuthorizationError, FullAuditAborted, GrowthStackError
from app.graph.audit_workflow import run_full_audit
from models.audit_models import AuditResult, Coordinates
from models.pillar_models import PILLARS, MarketingPillar, PillarInfo
from models.report_models import FullAuditReport
from services.credentials import has_credential, request_credential_selection
from services.pdf_report import build_pdf_report, report_filename

logger = logging.getLogger(__name__)

router = APIRouter()


# --------- Request / Response モデル ---------


class AnalyzeRequest(BaseModel):
    pillar: MarketingPillar
    domain: str = Field(..., min_length=1)
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class FullAuditRequest(BaseModel):
    domain: str = Field(..., min_length=1)
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class CredentialRequest(BaseModel):
    api_key: str = Field(..., min_length=1)


class CredentialStatus(BaseModel):
    has_credential: bool


def _resolve_coordinates(
    request: Request,
    latitude: Optional[float],
    longitude: Optional[float],
) -> Optional[Coordinates]:
    """リクエストで座標が指定されていればそれを、無ければ起動時に取れた座標を使う。"""
    if latitude is not None and longitude is not None:
        return Coordinates(latitude=latitude, longitude=longitude)
    return getattr(request.app.state, "coordinates", None)


def _credential_required(e: AuthorizationError) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"detail": str(e), "credential_required": True},
    )


# --------- エンドポイント ---------


@router.get("/pillars", response_model=List[PillarInfo])
def api_pillars() -> List[PillarInfo]:
    """タブ表示用のピラー一覧（カタログ順）。"""
    return list(PILLARS)


@router.get("/credentials", response_model=CredentialStatus)
def api_credential_status() -> CredentialStatus:
    return CredentialStatus(has_credential=has_credential())


@router.post("/credentials", response_model=CredentialStatus)
def api_select_credential(payload: CredentialRequest) -> CredentialStatus:
    """
    Gemini の API キーを登録する（キー選択フロー）。
    401 + credential_required が返ってきたらフロント側からここを呼ぶ想定。
    """
    try:
        request_credential_selection(payload.api_key)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return CredentialStatus(has_credential=has_credential())


@router.post("/analyze", response_model=AuditResult)
def api_analyze(payload: AnalyzeRequest, request: Request):
    """
    1 ピラー分の監査を返すメインAPI。

    - 認可エラー → 401（キー登録フローへ）
    - それ以外のモデル呼び出しエラー → 固定のエラー結果（キャッシュはしない）
    """
    logger.info("[api.analyze] pillar=%s domain=%s", payload.pillar.value, payload.domain)

    coordinates = _resolve_coordinates(request, payload.latitude, payload.longitude)
    try:
        return analyze_pillar(payload.pillar, payload.domain, coordinates)
    except AuthorizationError as e:
        return _credential_required(e)
    except GrowthStackError as e:
        logger.error("[api.analyze] model call failed pillar=%s error=%s", payload.pillar.value, e)
        return AuditResult.error_result()


def _run_full_audit(payload: FullAuditRequest, request: Request) -> FullAuditReport:
    coordinates = _resolve_coordinates(request, payload.latitude, payload.longitude)
    return run_full_audit(payload.domain, coordinates)


@router.post("/full-audit", response_model=FullAuditReport)
def api_full_audit(payload: FullAuditRequest, request: Request):
    """全ピラー一括監査。途中で失敗したら 502 で失敗ピラーを返す。"""
    logger.info("[api.full-audit] start domain=%s", payload.domain)
    try:
        return _run_full_audit(payload, request)
    except AuthorizationError as e:
        return _credential_required(e)
    except FullAuditAborted as e:
        return JSONResponse(
            status_code=502,
            content={"detail": str(e), "pillar": e.pillar, "completed": e.completed},
        )


@router.post("/full-audit/pdf")
def api_full_audit_pdf(payload: FullAuditRequest, request: Request):
    """全ピラー一括監査を実行して PDF（表紙 + ピラーごとのページ）で返す。"""
    logger.info("[api.full-audit.pdf] start domain=%s", payload.domain)
    try:
        report = _run_full_audit(payload, request)
    except AuthorizationError as e:
        return _credential_required(e)
    except FullAuditAborted as e:
        return JSONResponse(
            status_code=502,
            content={"detail": str(e), "pillar": e.pillar, "completed": e.completed},
        )

    filename = report_filename(payload.domain)
    return Response(
        content=build_pdf_report(report),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
