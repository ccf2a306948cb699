"""Tests for the file-loader example."""


class TestFileLoaderApp:
    """Verify components loaded from disk compose into one document."""

    def test_lists_components(self, example_app) -> None:
        assert example_app.source.list_components() == ["layout/base", "pages/home", "widgets/card"]

    def test_layout_head_lifted(self, example_app) -> None:
        head = example_app.home_output.split("</head>", 1)[0]
        assert "<title>Welcome | My Site</title>" in head
        assert '<link rel="stylesheet" href="/static/site.css">' in head

    def test_card_stylesheet_once(self, example_app) -> None:
        assert example_app.home_output.count('href="/static/card.css"') == 1

    def test_slots_projected(self, example_app) -> None:
        output = example_app.home_output
        assert '<h1 slot="heading">Welcome</h1>' in output
        assert "<h2>Head lifting</h2>" in output
        assert "Child stylesheets land in the page head once." in output

    def test_conditional_badge(self, example_app) -> None:
        assert example_app.home_output.count('<span class="badge">New</span>') == 1

    def test_script_registered_once_bootstrapped_per_card(self, example_app) -> None:
        output = example_app.home_output
        assert output.count('<script id="tessera-') == 1
        assert output.count("DOMContentLoaded") == 3

    def test_utility_styles(self, example_app) -> None:
        assert ".p-4 { padding: 1rem; }" in example_app.home_output
        assert ".flex { display: flex; gap: 1rem; }" in example_app.home_output

    def test_custom_data(self, example_app) -> None:
        output = example_app.launch_output
        assert "<title>Launch | My Site</title>" in output
        assert "<h2>Ship it</h2>" in output
        assert output.count("<article") == 1
