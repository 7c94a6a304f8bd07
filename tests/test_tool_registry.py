"""
Tests for skill discovery, the tool registry and the tool executor.
"""

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import config
from agency.skills.discovery import SkillNotFoundError, discover_skills, load_skill, parse_frontmatter
from agency.tools.definitions import build_tool_descriptions, get_tool_definitions, get_tool_registry
from agency.tools.executor import ToolExecutor, build_tool_result_message
from agency.tools.results import format_tool_result

DCF_SKILL = """---
name: dcf-valuation
description: Discounted cash flow valuation of a public company
---

# DCF Valuation

1. Fetch segmented revenues.
2. Project free cash flow.
"""


def write_skill(root: Path, folder: str, content: str) -> None:
    skill_dir = root / folder
    skill_dir.mkdir(parents=True)
    (skill_dir / "SKILL.md").write_text(content, encoding="utf-8")


class SkillDirTestCase(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.skills_root = Path(self._tmp.name)
        self._patch = patch.object(config, "SKILL_DIRS", [self.skills_root])
        self._patch.start()

    def tearDown(self):
        self._patch.stop()
        self._tmp.cleanup()


class TestSkillDiscovery(SkillDirTestCase):

    def test_discovers_valid_skills_only(self):
        write_skill(self.skills_root, "dcf", DCF_SKILL)
        write_skill(self.skills_root, "broken", "---\nname: broken\n---\nno description")
        write_skill(self.skills_root, "plain", "just markdown")

        skills = discover_skills()

        self.assertEqual([s.name for s in skills], ["dcf-valuation"])
        self.assertEqual(skills[0].description, "Discounted cash flow valuation of a public company")

    def test_first_directory_wins(self):
        other = self.skills_root / "second"
        first = self.skills_root / "first"
        write_skill(first, "dcf", DCF_SKILL)
        write_skill(other, "dcf", DCF_SKILL.replace("Discounted", "Overridden"))

        skills = discover_skills([first, other])

        self.assertEqual(len(skills), 1)
        self.assertTrue(skills[0].description.startswith("Discounted"))

    def test_load_skill_returns_body(self):
        write_skill(self.skills_root, "dcf", DCF_SKILL)
        skill, body = load_skill("dcf-valuation")
        self.assertEqual(skill.name, "dcf-valuation")
        self.assertTrue(body.startswith("# DCF Valuation"))

    def test_unknown_skill(self):
        with self.assertRaises(SkillNotFoundError):
            load_skill("missing")

    def test_invalid_yaml_frontmatter(self):
        meta, body = parse_frontmatter("---\nname: [unclosed\n---\nbody")
        self.assertEqual(meta, {})
        self.assertTrue(body.startswith("---"))


class TestToolRegistry(SkillDirTestCase):

    def test_skill_tool_only_when_skills_exist(self):
        names = [tool.name for tool in get_tool_registry()]
        self.assertNotIn("skill", names)
        self.assertIn("browser", names)

        write_skill(self.skills_root, "dcf", DCF_SKILL)
        names = [tool.name for tool in get_tool_registry()]
        self.assertIn("skill", names)

    def test_definitions_have_api_shape(self):
        for definition in get_tool_definitions():
            self.assertIn("name", definition)
            self.assertIn("description", definition)
            self.assertEqual(definition["input_schema"]["type"], "object")

    def test_descriptions_block(self):
        write_skill(self.skills_root, "dcf", DCF_SKILL)
        text = build_tool_descriptions()
        self.assertIn("### browser\n\n", text)
        self.assertIn("### skill\n\n", text)
        self.assertIn("dcf-valuation", text)
        # Finance tools share one description
        self.assertEqual(text.count("### get_"), 1)


class TestToolExecutor(SkillDirTestCase):

    def setUp(self):
        super().setUp()
        self.browser = MagicMock()
        self.executor = ToolExecutor(browser_executor=self.browser)

    def test_unknown_tool(self):
        result = self.executor.execute("teleport", {}, "tu_1")
        self.assertTrue(result.is_error)
        self.assertIn("Unknown tool: teleport", json.loads(result.content)["data"]["error"])

    def test_tool_failure_becomes_error_envelope(self):
        result = self.executor.execute("get_company_news", {}, "tu_2")
        payload = json.loads(result.content)["data"]
        self.assertTrue(result.is_error)
        self.assertEqual(payload["errorType"], "missing_parameter")

    def test_browser_error_payload_marks_result(self):
        self.browser.execute.return_value = {"error": "[Browser] click failed", "errorType": "interaction"}
        result = self.executor.execute("browser", {"action": "act"}, "tu_3")
        self.assertTrue(result.is_error)

    def test_browser_success(self):
        self.browser.execute.return_value = {"ok": True, "url": "https://example.com"}
        result = self.executor.execute("browser", {"action": "navigate", "url": "https://example.com"})
        self.assertFalse(result.is_error)
        self.assertEqual(json.loads(result.content), {"data": {"ok": True, "url": "https://example.com"}})

    def test_source_urls_in_envelope(self):
        mock_news = MagicMock(return_value=([{"title": "x"}], ["https://api.example/news"]))
        self.executor._handlers["get_company_news"] = mock_news
        result = self.executor.execute("get_company_news", {"ticker": "AAPL"}, "tu_4")
        self.assertEqual(
            json.loads(result.content),
            {"data": [{"title": "x"}], "sourceUrls": ["https://api.example/news"]},
        )

    def test_skill_tool(self):
        write_skill(self.skills_root, "dcf", DCF_SKILL)
        result = self.executor.execute("skill", {"name": "dcf-valuation"}, "tu_5")
        payload = json.loads(result.content)["data"]
        self.assertEqual(payload["skill"], "dcf-valuation")
        self.assertIn("Project free cash flow", payload["instructions"])

    def test_close_releases_browser(self):
        self.executor.close()
        self.browser.close.assert_called_once()

    def test_result_message_shape(self):
        result = self.executor.execute("teleport", {}, "tu_6")
        message = build_tool_result_message([result])
        self.assertEqual(message["role"], "user")
        self.assertEqual(message["content"][0]["tool_use_id"], "tu_6")
        self.assertTrue(message["content"][0]["is_error"])


class TestFormatToolResult(unittest.TestCase):

    def test_without_urls(self):
        self.assertEqual(json.loads(format_tool_result({"a": 1})), {"data": {"a": 1}})

    def test_keeps_unicode(self):
        self.assertIn("€", format_tool_result({"price": "€10"}))


if __name__ == "__main__":
    unittest.main()
