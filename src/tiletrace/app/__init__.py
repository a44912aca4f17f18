"""
The APP layer glues the pure model to Qt: the signal-emitting Store, the
QTimer-backed scheduler and the QApplication / QSettings setup.
"""
