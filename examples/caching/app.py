"""Render caching -- identical inputs render once.

Every component render is memoized by a fingerprint of its data, manifest,
template and script. A counting FunctionSource with the component cache off
shows which renders actually ran: the second page render is a pure cache
hit and never touches the source.

Run:
    python app.py
"""

from tessera import Environment, FunctionSource

COMPONENTS = {
    "dashboard": {
        "settings": {"imports": {"stat-tile": "tile"}},
        "template": (
            "<section>"
            '<stat-tile label="Users" :value="stats.users"></stat-tile>'
            '<stat-tile label="Revenue" :value="stats.revenue"></stat-tile>'
            "</section>"
        ),
    },
    "tile": '<div class="tile"><b><slot name="label"></slot></b> <slot name="value"></slot></div>',
}

loads: list[str] = []


def load(uri: str):
    """Record every lookup that reaches the source."""
    loads.append(uri)
    return COMPONENTS.get(uri)


env = Environment(FunctionSource(load), cache_components=False)

stats = {"users": 1200, "revenue": "$45K"}

first_output = env.render("dashboard", {"stats": stats})
loads_after_first = len(loads)

# Same data: the root render is a cache hit
second_output = env.render("dashboard", {"stats": stats})
loads_after_second = len(loads)

# New data: the dashboard and the changed tile render again
third_output = env.render("dashboard", {"stats": {"users": 1200, "revenue": "$99K"}})
info = env.cache_info()


def main() -> None:
    print("=== First render ===")
    print(first_output)
    print(f"\nsource loads: {loads_after_first}")

    print("\n=== Second render (cached) ===")
    print(second_output)
    print(f"\nsource loads: {loads_after_second}")

    print("\n=== Third render (new revenue) ===")
    print(third_output)
    print(f"\ncache: {info['renders']}")


if __name__ == "__main__":
    main()
