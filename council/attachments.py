"""Attachment ingestion and construction of the effective council query."""

import base64
import mimetypes
from pathlib import Path

from council.models import Attachment, AttachmentKind, CouncilRequest, InlineDocument

PDF_MIME_TYPE = "application/pdf"


def load_attachment(path: Path) -> Attachment:
    """Read a file for attaching to a query.

    PDFs are read as a base64 payload for inline transmission; everything
    else is read as UTF-8 text.

    Raises:
        FileNotFoundError: If path does not exist.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Attachment not found: {path}")
    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type == PDF_MIME_TYPE:
        payload = base64.b64encode(path.read_bytes()).decode("ascii")
        return Attachment(name=path.name, content=payload, kind=AttachmentKind.BINARY)
    text = path.read_text(encoding="utf-8", errors="replace")
    return Attachment(name=path.name, content=text, kind=AttachmentKind.TEXT)


def build_request(query_text: str, attachment: Attachment | None = None) -> CouncilRequest:
    """Combine the user's text and optional attachment into what the council sees.

    Text attachments are appended to the prompt after a document delimiter;
    binary attachments travel as an inline document. An empty query with an
    attachment becomes a default analysis instruction.

    Raises:
        ValueError: If there is neither query text nor an attachment.
    """
    text = query_text.strip()
    if not text and attachment is None:
        raise ValueError("Nothing to submit: empty query and no attachment")
    if attachment is None:
        return CouncilRequest(prompt=text, display_prompt=text)

    if attachment.kind is AttachmentKind.BINARY:
        if text:
            display = f"{text}\n\n[Attached PDF: {attachment.name}]"
        else:
            text = f"Analyze this PDF document: {attachment.name}"
            display = f"[Attached PDF: {attachment.name}]"
        document = InlineDocument(data=base64.b64decode(attachment.content), mime_type=PDF_MIME_TYPE)
        return CouncilRequest(prompt=text, display_prompt=display, document=document)

    if text:
        display = f"{text}\n\n[Attached: {attachment.name}]"
    else:
        text = f"Analyze this document: {attachment.name}"
        display = f"[Attached: {attachment.name}]"
    prompt = f"{text}\n\n--- Document Content ({attachment.name}) ---\n{attachment.content}"
    return CouncilRequest(prompt=prompt, display_prompt=display)
