"""Hello World -- the simplest tessera example.

Render a component from an in-memory source with custom data.
No components directory needed.

Run:
    python app.py
"""

from tessera import DictSource, Environment

env = Environment(
    DictSource(
        {
            "hello": {
                "settings": {"data": {"name": "World"}},
                "template": "<p>Hello, <slot name='name'></slot>!</p>",
            }
        }
    )
)

# Render with the manifest's default data
output = env.render("hello")


def main() -> None:
    print(output)
    print()

    # Custom data overrides the defaults
    for name in ["Tessera", "Bengal", "Python"]:
        print(env.render("hello", {"name": name}))


if __name__ == "__main__":
    main()
