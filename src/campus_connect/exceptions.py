# Copyright 2025 Gowtham Rao <rao@ohdsi.org>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Defines the error taxonomy shared by the calculator, client and editor."""


class CampusConnectError(Exception):
    """Base class for all recoverable errors raised by this package.

    Args:
        message: A short description of what went wrong.
        detail: The server-supplied ``detail`` string, when the backend sent one.

    """

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class ParseError(CampusConnectError):
    """A timestamp could not be parsed as a date."""


class NotFoundError(CampusConnectError):
    """The requested record does not exist."""


class ValidationError(CampusConnectError):
    """The backend rejected a field value."""


class TransportError(CampusConnectError):
    """The backend could not be reached or answered with an unexpected failure."""
