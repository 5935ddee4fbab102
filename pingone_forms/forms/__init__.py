"""
Forms functionality: remote form operations and export/import batches.
"""

from pingone_forms.forms.api import FormSummary, FormsManager
from pingone_forms.forms.transfer import (
    TransferResult,
    export_forms,
    form_filename,
    import_forms,
    transform_form_for_export,
)

__all__ = [
    "FormSummary",
    "FormsManager",
    "TransferResult",
    "export_forms",
    "import_forms",
    "form_filename",
    "transform_form_for_export",
]
