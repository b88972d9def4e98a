"""
main.py — Bootstrap

1. Load tuning
2. Create the app
3. Restore the ledger from the save file and spawn its automatons
4. Push the game scene
5. Run
"""

from core.app import App
from core.save import JsonFileSave
from core.tuning import get as _tun, load as _load_tuning
from scenes.incremental_scene import IncrementalScene


def main():
    _load_tuning()
    app = App(
        title="Fever Dream Incremental",
        width=int(_tun("display", "width", 960)),
        height=int(_tun("display", "height", 640)),
        fps=int(_tun("display", "fps", 60)),
    )
    backend = JsonFileSave()
    print(f"[MAIN] Save file: {backend.describe()}")
    app.push_scene(IncrementalScene(backend))
    app.run()


if __name__ == "__main__":
    main()
