"""Custom exceptions for the scene and event domain."""

from __future__ import annotations


class DiscoveryError(Exception):
	"""Base class for discovery related errors."""

	status_code: int = 400
	detail: str = "discovery_error"

	def __init__(self, detail: str | None = None) -> None:
		super().__init__(detail or self.detail)
		if detail:
			self.detail = detail


class NotFoundError(DiscoveryError):
	"""Raised when no record exists for a primary key or record key."""

	status_code = 404
	detail = "not_found"


class DeletedError(DiscoveryError):
	"""Raised when the record exists but has been soft-deleted."""

	status_code = 410
	detail = "deleted"


class DuplicateNameError(DiscoveryError):
	"""Raised by the explicit name check when an owner already uses a name."""

	status_code = 409
	detail = "duplicate_name"


class ValidationError(DiscoveryError):
	"""Raised for domain rules that schema validation does not cover."""

	status_code = 422
	detail = "validation_error"


class CursorDecodeError(DiscoveryError):
	"""Raised when a pagination cursor cannot be decoded."""

	status_code = 400
	detail = "bad_cursor"
