"""
Request envelope model for pathfinder.

A request is a single JSON object read from stdin with two optional string
fields, ``query`` and ``cwd``.
"""

import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import RequestError


class SearchRequest(BaseModel):
    """
    Incoming completion request.

    Attributes:
        query: Raw query text (defaults to the empty string)
        cwd: Working directory the query is relative to (defaults to the process cwd)
    """

    model_config = ConfigDict(extra='ignore')

    query: Optional[str] = Field(None, description="Raw query text")
    cwd: Optional[str] = Field(None, description="Working directory for the query")

    def get_query(self) -> str:
        """Get the query text, treating a missing query as empty."""
        return self.query if self.query is not None else ""

    def get_cwd(self) -> Path:
        """Get the absolute working directory for this request."""
        cwd = Path(self.cwd) if self.cwd is not None else Path(os.getcwd())
        if not cwd.is_absolute():
            cwd = Path(os.getcwd()) / cwd
        return cwd

    @classmethod
    def from_bytes(cls, data: bytes) -> 'SearchRequest':
        """
        Decode a request from raw stdin bytes.

        Args:
            data: UTF-8 encoded JSON object

        Returns:
            Parsed SearchRequest

        Raises:
            RequestError: If the bytes are not valid UTF-8 JSON of the expected shape
        """
        try:
            text = data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise RequestError(f"Request is not valid UTF-8: {e}") from e

        try:
            return cls.model_validate_json(text)
        except ValidationError as e:
            raise RequestError(f"Malformed request: {e}") from e
