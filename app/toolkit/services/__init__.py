"""
Default implementations of the toolkit collaborator protocols.

- EmailService: Templated email via Django mail (EmailSender)
- ReportLabInvoiceRenderer: Payout invoice PDFs (InvoicePdfRenderer)
- DefaultStorageBackend: Django default_storage (ObjectStorage)

Usage:
    from toolkit.services import EmailService
    from toolkit.services.pdf import ReportLabInvoiceRenderer  # Alternative import
"""

from toolkit.services.email import EmailService
from toolkit.services.pdf import ReportLabInvoiceRenderer
from toolkit.services.storage import DefaultStorageBackend

__all__ = ["DefaultStorageBackend", "EmailService", "ReportLabInvoiceRenderer"]
