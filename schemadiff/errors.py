"""
errors
======

Exceptions raised by the schema diff action.

Every failure is fatal for the run. Library code raises one of the classes
below; only :func:`schemadiff.main.main` catches them and reports the message
as the run's failure reason.
"""

from __future__ import annotations


class SchemaDiffError(Exception):
    """Base class for all action failures."""


class InputError(SchemaDiffError):
    """An action input or the run context is missing or malformed."""


class BranchListError(SchemaDiffError):
    """Listing the project branches returned a non-success status."""


class BranchNotFoundError(SchemaDiffError):
    """A compare or base selector matched no branch."""


class NoParentError(SchemaDiffError):
    """The compare branch has no parent and no base branch was given."""


class ParentNotFoundError(SchemaDiffError):
    """The compare branch's parent id matches no known branch."""


class SchemaFetchError(SchemaDiffError):
    """Retrieving a branch schema returned a non-success status."""


class CreateCommentError(SchemaDiffError):
    """Creating the summary comment did not return 201."""


class UpdateCommentError(SchemaDiffError):
    """Updating the summary comment did not return 200."""


class DeleteCommentError(SchemaDiffError):
    """Deleting the summary comment did not return 204."""
