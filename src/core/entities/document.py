"""
Entity: Document

Arquivo de boleto enviado para análise e o handle devolvido
pela submissão assíncrona. Modelo puro, sem dependência de HTTP.
"""

import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from src.core.errors import InvalidDocumentError

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class FileType(str, Enum):
    JPEG = "image/jpeg"
    PNG = "image/png"
    PDF = "application/pdf"


@dataclass(frozen=True)
class DocumentFile:
    """Boleto (imagem ou PDF) pronto para upload."""
    file_name: str
    content: bytes
    content_type: str
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES

    def __post_init__(self):
        if self.content_type not in {t.value for t in FileType}:
            raise InvalidDocumentError("Tipo de arquivo inválido. Use JPG, PNG ou PDF.")
        if not self.content:
            raise InvalidDocumentError("Arquivo vazio")
        if len(self.content) > self.max_bytes:
            mb = self.max_bytes // (1024 * 1024)
            raise InvalidDocumentError(f"Arquivo muito grande. Máximo: {mb}MB")

    @property
    def file_type(self) -> FileType:
        return FileType(self.content_type)

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: str | Path, max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> "DocumentFile":
        """Lê o arquivo do disco e infere o MIME type pela extensão."""
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            file_name=path.name,
            content=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
            max_bytes=max_bytes,
        )


@dataclass(frozen=True)
class SubmissionHandle:
    """Identifica uma análise assíncrona em andamento ou concluída."""
    id: str
    file_name: str
    file_size: int
    file_type: FileType
    status: str = "processing"
    message: str = ""
