# -*- coding: utf-8 -*-
"""Exceptions raised by the payroll core and its collaborators."""

from __future__ import annotations


class PayrollError(Exception):
    """Base class; ``str(exc)`` is safe to show to the operator."""


class EntryValidationError(PayrollError):
    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class GatewayError(PayrollError):
    """Transport or application failure talking to the spreadsheet endpoint."""


class InvalidScriptUrl(PayrollError):
    pass


class PhotoRejected(PayrollError):
    pass


class AssistantError(PayrollError):
    pass
