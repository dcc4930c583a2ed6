"""Data export, import and clearing routes"""

from typing import Any
from uuid import UUID
import logging

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id
from domain.models import get_db_session
from domain.schemas import (
    ClearDataResult,
    CsvImportRequest,
    CsvImportResult,
    ExportData,
    ImportResult,
    ImportValidationResult,
)
from services.csv_import_service import CsvImportService
from services.data_transfer_service import DataTransferService

router = APIRouter(prefix="/data", tags=["Data"])
logger = logging.getLogger("mealtracker.api.data")


@router.get("/export", response_model=ExportData)
def export_data(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Everything the caller owns, ready to be imported again"""
    return DataTransferService.export_data(db, user_id)


@router.post("/import/validate", response_model=ImportValidationResult)
def validate_import(payload: Any = Body(...)):
    """Check that a payload has the shape of an export file"""
    return DataTransferService.validate_json_data(payload)


@router.post("/import", response_model=ImportResult)
def import_data(
    payload: Any = Body(...),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """
    Import an export file into the caller's account.

    Records are written in batches; failing batches are counted as errors
    and the rest of the import continues.
    """
    return DataTransferService.import_data(db, user_id, payload)


@router.post("/import/csv", response_model=CsvImportResult)
def import_csv(
    payload: CsvImportRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Import ``date,dish,notes`` rows, creating dishes and sources as needed"""
    return CsvImportService.import_csv(db, user_id, payload.content)


@router.delete("", response_model=ClearDataResult)
def clear_data(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Delete all of the caller's dishes, history, tags and sources"""
    return DataTransferService.clear_data(db, user_id)
