import unittest


class TestNormalizeTitle(unittest.TestCase):
    def test_strips_polite_and_scaffold_prefixes(self):
        from planka_agent.core.extractor import normalize_title

        title = normalize_title("Please add a task to my planka board that updates the README by next friday")
        self.assertEqual(title, "updates the README by next friday")
        self.assertNotIn("please", title.lower())

    def test_question_prefix(self):
        from planka_agent.core.extractor import normalize_title

        self.assertEqual(normalize_title("Could you review the deploy script"), "review the deploy script")

    def test_stops_at_first_sentence(self):
        from planka_agent.core.extractor import normalize_title

        self.assertEqual(
            normalize_title("Please, fix the login redirect. It loops forever."),
            "fix the login redirect",
        )

    def test_only_first_line(self):
        from planka_agent.core.extractor import normalize_title

        self.assertEqual(normalize_title("write release notes\nwith all merged PRs"), "write release notes with all merged PRs")

    def test_empty(self):
        from planka_agent.core.extractor import normalize_title

        self.assertEqual(normalize_title(""), "")
        self.assertEqual(normalize_title(None), "")


class TestExtractDatePhrase(unittest.TestCase):
    def test_end_of_next_week_sentinel(self):
        from planka_agent.core.extractor import END_OF_NEXT_WEEK, extract_date_phrase

        self.assertEqual(extract_date_phrase("finish by the end of next week"), END_OF_NEXT_WEEK)
        self.assertEqual(extract_date_phrase("Done until END OF THE NEXT WEEK please"), END_OF_NEXT_WEEK)

    def test_patterns_in_order(self):
        from planka_agent.core.extractor import extract_date_phrase

        self.assertEqual(extract_date_phrase("ship it until friday, then rest"), "until friday")
        self.assertEqual(extract_date_phrase("report due 30.10.2025."), "due 30")
        self.assertEqual(extract_date_phrase("do it in 3 days"), "in 3 days")
        self.assertEqual(extract_date_phrase("deploy next monday"), "next monday")
        self.assertEqual(extract_date_phrase("call Bob tomorrow"), "tomorrow")

    def test_no_date(self):
        from planka_agent.core.extractor import extract_date_phrase

        self.assertIsNone(extract_date_phrase("refactor the parser"))
        self.assertIsNone(extract_date_phrase(""))


class TestGuessLabels(unittest.TestCase):
    def test_keyword_groups(self):
        from planka_agent.core.extractor import guess_labels

        self.assertEqual(guess_labels("Fix the flaky QA test"), ["testing", "bug"])
        self.assertEqual(guess_labels("Update README"), ["docs"])
        self.assertEqual(guess_labels("Prompt the GPT agent"), ["llm"])
        self.assertEqual(guess_labels("Water the plants"), [])

    def test_extract_keeps_description_verbatim(self):
        from planka_agent.core.extractor import extract

        text = "Please update the docs.\nAlso the changelog."
        result = extract(text)
        self.assertEqual(result.description, text)
        self.assertEqual(result.title, "update the docs")
        self.assertEqual(result.labels, ["docs"])


if __name__ == "__main__":
    unittest.main()
