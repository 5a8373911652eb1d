"""
Pytest configuration and fixtures for knowledge-composer tests.
"""

import pytest
from pathlib import Path


ALL_SECTIONS = [
    "Key Concepts",
    "Common Patterns",
    "Implementation Details",
    "Validation Methods",
    "Authoritative References",
]


def build_module_text(title: str, sections: list[str] | None = None) -> str:
    """Markdown module with a level-1 title and one level-2 heading per section."""
    if sections is None:
        sections = ALL_SECTIONS
    text = f"# {title}\n\nOverview of {title}.\n"
    for section in sections:
        text += f"\n## {section}\n\nNotes about {section.lower()} for {title}.\n"
    return text


@pytest.fixture
def make_module():
    """Factory building module text with the given sections."""
    return build_module_text


@pytest.fixture
def temp_modules(tmp_path: Path):
    """Create a temporary module directory with test modules."""
    modules_path = tmp_path / "modules"
    modules_path.mkdir()

    (modules_path / "databases").mkdir()
    (modules_path / ".drafts").mkdir()

    # Module 1: Valid module with frontmatter
    (modules_path / "intro.md").write_text("""---
title: Introduction
tags:
  - onboarding
---

# Intro

How to use knowledge modules.

## Key Concepts

Modules are pasted into a chat session.

## Common Patterns

Reference several modules at once.

## Implementation Details

Each module is a Markdown file.

## Validation Methods

Check every required heading exists.

## Authoritative References

- The module index
""", encoding="utf-8")

    # Module 2: Valid module in a sub-folder using the Troubleshooting alternative
    (modules_path / "databases" / "duckdb.md").write_text(
        build_module_text("DuckDB", [
            "Key Concepts",
            "Common Patterns",
            "Implementation Details",
            "Troubleshooting",
            "Authoritative References",
        ]),
        encoding="utf-8",
    )

    # Module 3: Missing the references section
    (modules_path / "no_refs.md").write_text(
        build_module_text("No References", ALL_SECTIONS[:-1]),
        encoding="utf-8",
    )

    # Module 4: Numbered, punctuated and differently cased headings
    (modules_path / "numbered.md").write_text("""# Numbered

## 1. Key Concepts

## 2. common patterns

## 3) Implementation-Details

## 4. TROUBLESHOOTING ##

## 5. Authoritative References:
""", encoding="utf-8")

    # Module 5: References heading only inside a fenced code block
    (modules_path / "fenced.md").write_text("""# Fenced

## Key Concepts

## Common Patterns

## Implementation Details

## Validation Methods

```markdown
## Authoritative References
```

The section Authoritative References is mentioned in body text only.
""", encoding="utf-8")

    # Module 6: Hidden draft (never served)
    (modules_path / ".drafts" / "secret.md").write_text(
        build_module_text("Secret"),
        encoding="utf-8",
    )

    yield modules_path


@pytest.fixture
def fs_store(temp_modules):
    """Create a FileSystemModuleStore over the temp module directory."""
    from knowledge_composer.store import FileSystemModuleStore
    return FileSystemModuleStore(temp_modules, ".md")


@pytest.fixture
def memory_store():
    """Create an InMemoryModuleStore with a few valid and invalid modules."""
    from knowledge_composer.store import InMemoryModuleStore
    return InMemoryModuleStore({
        "intro": build_module_text("Intro"),
        "A": build_module_text("A"),
        "B": build_module_text("B"),
        "C": build_module_text("C"),
        "broken": build_module_text("Broken", ["Key Concepts"]),
    })


@pytest.fixture
def patched_module_store(fs_store, monkeypatch):
    """Patch the MCP tools to use the temp module store."""
    from knowledge_composer import tools

    monkeypatch.setattr(tools, "module_store", fs_store)
    return fs_store
