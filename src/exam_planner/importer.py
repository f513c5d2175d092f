"""Import course notes from files in various formats."""
import json
from pathlib import Path

from exam_planner.models import CourseNote


def read_file_content(file_path: str) -> str:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix in (".txt", ".md"):
        return path.read_text()
    elif suffix == ".json":
        data = json.loads(path.read_text())
        return json.dumps(data, indent=2) if isinstance(data, dict) else str(data)
    elif suffix in (".yaml", ".yml"):
        import yaml
        data = yaml.safe_load(path.read_text())
        return str(data)
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
        return BeautifulSoup(html, "html.parser").get_text()
    else:
        # Try reading as plain text
        return path.read_text()


def note_title(file_path: str) -> str:
    """Readable title from a file name: 'week_3-notes.md' -> 'Week 3 Notes'."""
    stem = Path(file_path).stem.replace("_", " ").replace("-", " ")
    return " ".join(stem.split()).title() or "Untitled Note"


def import_note(file_path: str, title: str | None = None) -> CourseNote:
    """Read a file into a course note titled after the file unless given a title."""
    content = read_file_content(file_path)
    return CourseNote(title=title or note_title(file_path), content=content.strip())
