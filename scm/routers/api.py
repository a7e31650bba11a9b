from fastapi import APIRouter

from scm.services.placeholder_stats import JOB_STATUS, ORDER_RETURNS, PO_STATUS

router = APIRouter(prefix='/api/manager', tags=['api'])


@router.get('/job-status')
def job_status() -> list[dict]:
    return JOB_STATUS


@router.get('/order-returns')
def order_returns() -> list[dict]:
    return ORDER_RETURNS


@router.get('/po-status')
def po_status() -> list[dict]:
    return PO_STATUS
