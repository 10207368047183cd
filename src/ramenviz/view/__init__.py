"""
The VIEW layer holds the Qt widgets: the main window, the settings panel and
the PyVista viewer that drives the render session.
"""
