"""Press — an incremental static-site builder.

Reads page sources and data sources, runs an ordered extension pipeline, and
renders every page to the output tree. While watching, a changed data source
re-dirties exactly the pages that read it during their last render.

Quick start::

    import asyncio
    import press

    async def main():
        site = await press.create_press(
            "my-site/",
            setup=lambda p: p.layout("*.md", "_base"),
        )
        await site.build()
        site.start_watcher()
        await asyncio.Event().wait()

    asyncio.run(main())

Project layout::

    my-site/
        press.yaml       optional configuration
        src/             pages (.md, .markdown, .html); _name files are templates
        data/            data sources (.py, .json, .yaml, .yml)
        build/           output

"""

__version__ = "0.1.0"
__all__ = [
    "Press",
    "PressConfig",
    "__version__",
    "create_press",
    "load_config",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import press`` fast; the watcher and YAML stacks load on first use.
    """
    if name == "PressConfig":
        from press.config import PressConfig

        return PressConfig

    if name == "load_config":
        from press.config_loader import load_config

        return load_config

    if name == "Press":
        from press.app import Press

        return Press

    if name == "create_press":
        from press.app import create_press

        return create_press

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
