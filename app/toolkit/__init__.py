"""
Toolkit - External collaborator contracts and default implementations.

Key components:
    - protocols.py: InvoicePdfRenderer, EmailSender, ObjectStorage, EmailResult
    - services/email.py: EmailService (Django mail + templates)
    - services/pdf.py: ReportLabInvoiceRenderer
    - services/storage.py: DefaultStorageBackend (Django default_storage)

Usage:
    from toolkit.services import EmailService
    from toolkit.protocols import EmailSender

Note:
    - This app has no models.
    - For model-layer patterns, see core/ (BaseModel, model_mixins, managers).
"""
