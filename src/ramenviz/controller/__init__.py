"""
The CONTROLLER layer connects the model to the render context.
It owns loading (including the PyVista backed scene reader), the scene
resources and the render session. Only the background parse worker touches
Qt (QtCore threads and signals); no controller module builds widgets.
"""
