"""
Tests for structural validation of knowledge modules.
"""


def _module(identifier: str, content: str):
    from knowledge_composer.resolver import build_module
    return build_module(identifier, content)


# ============== Tests for normalize_heading() ==============

class TestNormalizeHeading:
    """Tests for heading normalization."""

    def test_case_folded(self):
        from knowledge_composer.utils import normalize_heading

        assert normalize_heading("KEY Concepts") == "key concepts"

    def test_punctuation_stripped(self):
        from knowledge_composer.utils import normalize_heading

        assert normalize_heading("Implementation-Details:") == "implementation details"

    def test_leading_ordinal_dropped(self):
        from knowledge_composer.utils import normalize_heading

        assert normalize_heading("2. Common Patterns") == "common patterns"
        assert normalize_heading("1.2 Common Patterns") == "common patterns"

    def test_leading_number_in_word_kept(self):
        from knowledge_composer.utils import normalize_heading

        assert normalize_heading("3D Rendering") == "3d rendering"


# ============== Tests for parse_section_families() ==============

class TestSectionFamilies:
    """Tests for section family parsing."""

    def test_alternatives_split(self):
        """Test 'X or Y' declares two alternatives of one family."""
        from knowledge_composer.validator import parse_section_families

        families = parse_section_families(["Validation Methods or Troubleshooting"])

        assert len(families) == 1
        assert families[0].name == "Validation Methods or Troubleshooting"
        assert families[0].alternatives == ("validation methods", "troubleshooting")

    def test_default_families(self):
        """Test the default configuration has five families."""
        from knowledge_composer.validator import default_section_families

        names = [f.name for f in default_section_families()]

        assert names == [
            "Key Concepts",
            "Common Patterns",
            "Implementation Details",
            "Validation Methods or Troubleshooting",
            "Authoritative References",
        ]


# ============== Tests for discover_sections() ==============

class TestDiscoverSections:
    """Tests for heading discovery."""

    def test_finds_headings_at_any_level(self):
        from knowledge_composer.validator import discover_sections

        sections = discover_sections("# Title\n\n### Key Concepts\n\ntext\n")

        assert sections == frozenset({"title", "key concepts"})

    def test_ignores_body_text(self):
        from knowledge_composer.validator import discover_sections

        sections = discover_sections("Key Concepts are listed here.\n#hashtag\n")

        assert sections == frozenset()

    def test_ignores_fenced_code(self):
        from knowledge_composer.validator import discover_sections

        content = "## Real\n\n~~~\n## Fake\n~~~\n\n````\n```\n## Also Fake\n````\n"

        assert discover_sections(content) == frozenset({"real"})

    def test_fence_with_info_string_does_not_close(self):
        from knowledge_composer.validator import discover_sections

        content = "```\n```python\n## Fake\n```\n## After Close\n"

        assert discover_sections(content) == frozenset({"after close"})

    def test_frontmatter_not_scanned(self):
        from knowledge_composer.validator import discover_sections

        content = "---\ntitle: x\n# comment: value\n---\n## Body Heading\n"

        assert discover_sections(content) == frozenset({"body heading"})


# ============== Tests for validate() ==============

class TestValidate:
    """Tests for the validate function."""

    def test_valid_module(self, make_module):
        """Test a module with every family is Valid."""
        from knowledge_composer.models import ValidationStatus
        from knowledge_composer.validator import validate

        report = validate(_module("intro", make_module("Intro")))

        assert report.status is ValidationStatus.VALID
        assert report.missing_sections == []
        assert report.module_identifier == "intro"

    def test_troubleshooting_satisfies_family(self, make_module):
        """Test either alternative satisfies its family."""
        from knowledge_composer.validator import validate

        content = make_module("X", [
            "Key Concepts", "Common Patterns", "Implementation Details",
            "Troubleshooting", "Authoritative References",
        ])

        assert validate(_module("x", content)).is_valid

    def test_missing_references_only(self, make_module):
        """Test a module missing only the references family reports exactly that."""
        from knowledge_composer.models import ValidationStatus
        from knowledge_composer.validator import validate

        content = make_module("X", [
            "Key Concepts", "Common Patterns", "Implementation Details", "Validation Methods",
        ])
        report = validate(_module("x", content))

        assert report.status is ValidationStatus.MISSING_SECTIONS
        assert report.missing_sections == ["Authoritative References"]

    def test_missing_reported_in_canonical_order(self, make_module):
        """Test missing families follow configuration order, not file order."""
        from knowledge_composer.validator import validate

        content = make_module("X", ["Implementation Details", "Common Patterns"])
        report = validate(_module("x", content))

        assert report.missing_sections == [
            "Key Concepts",
            "Validation Methods or Troubleshooting",
            "Authoritative References",
        ]

    def test_substring_heading_does_not_count(self, make_module):
        """Test a heading merely containing a section name does not satisfy it."""
        from knowledge_composer.validator import validate

        content = make_module("X", [
            "Key Concepts and More", "Common Patterns", "Implementation Details",
            "Validation Methods", "Authoritative References",
        ])

        assert validate(_module("x", content)).missing_sections == ["Key Concepts"]

    def test_numbered_headings(self, temp_modules):
        """Test numbered and punctuated headings are recognised."""
        from knowledge_composer.validator import validate

        content = (temp_modules / "numbered.md").read_text(encoding="utf-8")

        assert validate(_module("numbered", content)).is_valid

    def test_fenced_heading_does_not_count(self, temp_modules):
        """Test a heading inside a code fence is not a section."""
        from knowledge_composer.validator import validate

        content = (temp_modules / "fenced.md").read_text(encoding="utf-8")
        report = validate(_module("fenced", content))

        assert report.missing_sections == ["Authoritative References"]

    def test_custom_families(self):
        """Test configured families replace the defaults."""
        from knowledge_composer.validator import parse_section_families, validate

        families = parse_section_families(["Summary", "Examples or Recipes"])
        report = validate(_module("x", "## Summary\n\n## Recipes\n"), families)

        assert report.is_valid

    def test_pure(self, make_module):
        """Test validating the same module twice gives equal reports."""
        from knowledge_composer.validator import validate

        module = _module("x", make_module("X", ["Key Concepts"]))

        assert validate(module) == validate(module)
