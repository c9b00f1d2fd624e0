# Reporting subpackage - PDF audit reports
from .pdf import generate_pdf

__all__ = [
    "generate_pdf",
]
