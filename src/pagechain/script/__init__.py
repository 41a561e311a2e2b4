"""Chain scripts: builder chains stored as JSON files.

Modules:

* ``models``: ``ChainScript``, ``ChainStep``, ``ChainStepType`` data models.
* ``loader``: Load a chain script from disk.
* ``replay``: Append a script's steps to a ``Page`` builder.
"""

from pagechain.script.loader import load_chain_script
from pagechain.script.models import ChainScript, ChainStep, ChainStepType
from pagechain.script.replay import apply_script

__all__ = [
    "ChainScript",
    "ChainStep",
    "ChainStepType",
    "apply_script",
    "load_chain_script",
]
