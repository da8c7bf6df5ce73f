from __future__ import annotations


class UploadError(Exception):
    """An upload that cannot be answered with file metadata.

    Rendered to the client as ``{"error": message}`` with ``status_code``.
    """

    status_code = 400
    message = "File upload error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NoFileProvided(UploadError):
    def __init__(self, field_name: str = "upfile"):
        super().__init__(f'No file uploaded. Please select a file with the name "{field_name}".')


class FileTooLarge(UploadError):
    def __init__(self, limit_label: str = "50MB"):
        super().__init__(f"File too large. Maximum size is {limit_label}.")


class TooManyFiles(UploadError):
    def __init__(self, max_files: int = 1):
        allowed = "one file" if max_files == 1 else f"{max_files} files"
        super().__init__(f"Too many files. Only {allowed} allowed.")


class UnexpectedFieldName(UploadError):
    def __init__(self, field_name: str = "upfile"):
        super().__init__(f'Unexpected field name. Use "{field_name}" as the field name.')


class MalformedUpload(UploadError):
    def __init__(self, detail: str):
        super().__init__(f"File upload error: {detail}")


class InternalError(UploadError):
    status_code = 500
    message = "Internal server error while processing file"
