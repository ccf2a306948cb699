"""File-based components -- the most common real-world pattern.

Loads components from disk with FileSystemSource. Each component is a
directory holding settings.json, template.html and an optional script.js.
The home page imports a full-document layout and a card widget; the
layout's <head> and the card's stylesheet are lifted into the page head.

Run:
    python app.py
"""

from pathlib import Path

from tessera import Environment, FileSystemSource

components_dir = Path(__file__).parent / "components"
source = FileSystemSource(components_dir)
env = Environment(source)

home_output = env.render("pages/home")

# Same page, different data
launch_output = env.render(
    "pages/home",
    {"title": "Launch", "features": [{"name": "Ship it", "summary": "Everything is cached.", "new": True}]},
)


def main() -> None:
    print("Components:", ", ".join(source.list_components()))
    print()
    print("=== Home Page ===")
    print(home_output)
    print()
    print("=== Launch Page ===")
    print(launch_output)


if __name__ == "__main__":
    main()
