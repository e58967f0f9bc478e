"""Simple entrypoint to run the Wardrobe Flow engine locally."""

import json

from flow_app.app import WardrobeFlowApp


def main() -> None:
    app = WardrobeFlowApp()
    if not app.state.categories:
        for name, emoji, count in (("T-Shirts", "👕", 12), ("Socks", "🧦", 10), ("Jeans", "👖", 4)):
            app.add_category(name=name, emoji=emoji, initial_count=count)
    print(json.dumps(app.dashboard(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
