"""Import subject lists from datesheets and notes in various file formats."""
import json
import re
from pathlib import Path

from loguru import logger

from study_planner.subjects import add_subject, get_subject_names

# Leading bullets or numbering such as "-", "*", "1.", "2)"
_LIST_MARKER = re.compile(r"^\s*(?:[-*•]+|\d+[.)])\s*")


def read_file_content(file_path: str) -> str:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix in (".txt", ".md"):
        return path.read_text()
    elif suffix == ".json":
        data = json.loads(path.read_text())
        return _structured_to_text(data)
    elif suffix in (".yaml", ".yml"):
        import yaml
        data = yaml.safe_load(path.read_text())
        return _structured_to_text(data)
    elif suffix == ".pdf":
        from PyPDF2 import PdfReader
        reader = PdfReader(file_path)
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    elif suffix == ".docx":
        from docx import Document
        doc = Document(file_path)
        return "\n".join(p.text for p in doc.paragraphs)
    elif suffix in (".html", ".htm"):
        from bs4 import BeautifulSoup
        html = path.read_text()
        return BeautifulSoup(html, "html.parser").get_text("\n")
    else:
        # Try reading as plain text
        return path.read_text()


def _structured_to_text(data) -> str:
    """Flatten a list, or a mapping with a ``subjects`` list, to one name per line."""
    if isinstance(data, dict):
        data = data.get("subjects", [])
    if isinstance(data, list):
        return "\n".join(str(v) for v in data if v is not None)
    return "" if data is None else str(data)


def parse_subject_names(text: str) -> list[str]:
    """Split text into unique subject names, one per line or comma."""
    names = []
    seen = set()
    for line in text.splitlines():
        for part in line.split(","):
            name = _LIST_MARKER.sub("", part).strip()
            if name and name.lower() not in seen:
                seen.add(name.lower())
                names.append(name)
    return names


def import_subjects(db_path: str, owner: str, file_path: str) -> list[str]:
    """Add the subjects listed in a file. Returns only the newly added names."""
    names = parse_subject_names(read_file_content(file_path))
    existing = {n.lower() for n in get_subject_names(db_path, owner)}
    added = []
    for name in names:
        if name.lower() in existing:
            continue
        add_subject(db_path, owner, name)
        added.append(name)
    logger.info(f"Imported {len(added)} subjects from {Path(file_path).name}")
    return added
