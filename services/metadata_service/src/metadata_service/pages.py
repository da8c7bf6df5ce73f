from html import escape

from .config import Settings

UPLOAD_URL = "/api/fileanalyse"
HEALTH_URL = "/api/health"
INFO_URL = "/api/info"
TEST_FORM_URL = "/api/test-upload-form"

AVAILABLE_ENDPOINTS = [
    f"POST {UPLOAD_URL}",
    f"GET {HEALTH_URL}",
    f"GET {INFO_URL}",
    f"GET {TEST_FORM_URL}",
]


def api_info(settings: Settings) -> dict:
    return {
        "title": settings.service_name,
        "description": "Upload files and get metadata including name, type, and size",
        "endpoints": {
            "upload": {
                "method": "POST",
                "url": UPLOAD_URL,
                "field_name": settings.field_name,
                "response": {
                    "name": "string - original filename",
                    "type": "string - MIME type",
                    "size": "number - file size in bytes",
                },
            },
            "health": {
                "method": "GET",
                "url": HEALTH_URL,
                "description": "Service health check",
            },
        },
        "usage": [
            "1. Select a file using the form",
            f'2. Ensure the input field has name="{settings.field_name}"',
            f"3. Submit to POST {UPLOAD_URL}",
            "4. Receive JSON response with file metadata",
        ],
    }


def render_test_form(settings: Settings) -> str:
    field = escape(settings.field_name, quote=True)
    return f"""<!DOCTYPE html>
<html>
<head>
  <title>Test File Upload</title>
  <style>
    body {{ font-family: Arial, sans-serif; padding: 20px; }}
    form {{ max-width: 400px; margin: 20px 0; }}
    input[type="file"] {{ margin: 10px 0; padding: 10px; }}
    button {{ padding: 10px 20px; background: #007bff; color: white; border: none; cursor: pointer; }}
  </style>
</head>
<body>
  <h2>Test File Upload</h2>
  <p>Use this form to test the file upload API directly:</p>
  <form action="{UPLOAD_URL}" method="post" enctype="multipart/form-data">
    <label for="{field}">Choose file:</label><br>
    <input type="file" id="{field}" name="{field}" required><br>
    <button type="submit">Upload and Analyze</button>
  </form>
  <p><strong>Note:</strong> The input field name must be "{field}"</p>
</body>
</html>
"""
