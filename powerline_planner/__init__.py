"""Powerline Planner - Geometric kernel of a 2D pole/line network editor.

Draw electrical distribution networks (poles, conductor spans, dimension
annotations) on a canvas that can be georeferenced to UTM:
- Canvas <-> UTM <-> WGS84 coordinate mapping
- Priority-ordered snapping with a throttled LRU cache
- Angle and aligned dimensions driven by tool state machines
- Bounded undo/redo over reversible commands
- GPS track import fitted to the canvas

Modules:
    core: Foundation classes (planar geometry, UTM projection, coordinate system)
    model: Data structures (Pole, Line, Dimension, DrawingModel, messages)
    editor: Editing machinery (commands, history, snapping, dimension tools, session)

Example:
    from powerline_planner.editor import DrawingSession

    session = DrawingSession()
    session.add_pole(x=100, y=100)
"""
