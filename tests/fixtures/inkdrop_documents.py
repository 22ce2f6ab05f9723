"""Sample Inkdrop documents for testing.

Builders for note, file and tag documents in the shape the local server
returns them, plus note bodies exercising references and frontmatter.
"""

import base64
from typing import Any, Dict, List, Optional

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-data"

# Note with frontmatter, a heading, an image and a link to another note
SAMPLE_BODY_WITH_REFERENCES = """---
title: Hello
public: true
---
# Hello

![diagram](inkdrop://file:img1)

See [the other note](inkdrop://note:other "Other") for details.
"""

# References inside code must be left alone
SAMPLE_BODY_WITH_CODE = """Intro ![a](inkdrop://file:real)

```markdown
![b](inkdrop://file:fenced)
```

Inline `![c](inkdrop://file:span)` code.
"""


def note_doc(
    note_id: str = "note:abc",
    body: str = "",
    title: str = "Hello World",
    book_id: str = "book:tjnPbJakw",
    tags: Optional[List[str]] = None,
    **extra: Any,
) -> Dict[str, Any]:
    """Build a note document as returned by the local server."""
    doc = {
        "_id": note_id,
        "_rev": "1-abc",
        "bookId": book_id,
        "title": title,
        "body": body,
        "tags": tags or [],
        "status": "none",
        "createdAt": 1700000000000,
        "updatedAt": 1700000001000,
    }
    doc.update(extra)
    return doc


def file_doc(
    file_id: str = "file:img1",
    data: bytes = PNG_BYTES,
    content_type: str = "image/png",
) -> Dict[str, Any]:
    """Build a file document fetched with attachments=true."""
    return {
        "_id": file_id,
        "name": "image.png",
        "contentType": content_type,
        "_attachments": {
            "index": {
                "content_type": content_type,
                "data": base64.b64encode(data).decode("ascii"),
            }
        },
    }


def tag_doc(tag_id: str = "tag:blog", name: str = "Blog") -> Dict[str, Any]:
    """Build a tag document."""
    return {"_id": tag_id, "name": name, "color": "default"}
