"""
Draw events hub.

Outward notifications of the editing core. Hosts connect to these
signals to mirror edits elsewhere (persistence, undo stacks, UI panels).
Payloads are lists of GeoJSON Feature dicts unless noted.
"""

from PyQt6.QtCore import QObject, pyqtSignal


class DrawEvents(QObject):
    """
    Signals:
        created(list): Features created by drawing, merge or split
        deleted(list): Features removed by trash, merge or split
        updated(list, str): Features changed in place, with the action name
        modeChanged(str): New mode value
        selectionChanged(list): Selected feature ids after a render
    """

    created = pyqtSignal(object)
    deleted = pyqtSignal(object)
    updated = pyqtSignal(object, str)
    modeChanged = pyqtSignal(str)
    selectionChanged = pyqtSignal(object)
