"""Async rendering -- async component sources and concurrent pages.

Components come from a coroutine (standing in for a database or an HTTP
API). Several pages render concurrently with asyncio.gather and share the
environment's caches.

Run:
    python app.py
"""

import asyncio

from tessera import Environment, FunctionSource

# -- Simulated async component store ---------------------------------------

STORE = {
    "pages/profile": {
        "settings": {"imports": {"user-card": "widgets/user"}},
        "template": '<main><user-card :user="user"></user-card></main>',
    },
    "widgets/user": {
        "settings": {"when": {"user.admin": {"role": "Administrator"}}, "data": {"role": "Member"}},
        "template": (
            '<div class="user"><strong><slot name="user.name"></slot></strong> '
            '<em><slot name="role"></slot></em></div>'
        ),
    },
}


async def fetch_component(uri: str):
    """Simulate a network round-trip per lookup."""
    await asyncio.sleep(0.01)
    return STORE.get(uri)


env = Environment(FunctionSource(fetch_component))

USERS = [
    {"name": "Ada", "admin": True},
    {"name": "Grace", "admin": False},
    {"name": "Linus", "admin": False},
]


async def render_all() -> list[str]:
    """Render one profile page per user concurrently."""
    return await asyncio.gather(*(env.render_async("pages/profile", {"user": user}) for user in USERS))


# Run at import time for test access
outputs = asyncio.run(render_all())


def main() -> None:
    for output in outputs:
        print(output)


if __name__ == "__main__":
    main()
