"""Receiver for client-side error reports."""

import logging

from fastapi import APIRouter, status

from .models import ErrorReceipt, ErrorReport

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


def configure_report_router(router: APIRouter) -> APIRouter:
    """Configure the error-report route.

    :param router: The APIRouter to configure
    :return: The configured APIRouter
    """

    @router.post(
        "/error-report",
        status_code=status.HTTP_202_ACCEPTED,
        response_model=ErrorReceipt,
    )
    async def report_error(report: ErrorReport) -> ErrorReceipt:
        LOGGER.error(
            "Client error %s at %s: %s\n%s",
            report.error_id,
            report.url or "-",
            report.message,
            report.stack or "",
        )
        if report.component_stack:
            LOGGER.debug("Component stack for %s: %s", report.error_id, report.component_stack)
        return ErrorReceipt(error_id=report.error_id)

    return router
