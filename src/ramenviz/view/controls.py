"""
Display Settings Control Panel
"""
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QLabel, QSlider, QGroupBox, QFormLayout, QCheckBox, QSpinBox, QDoubleSpinBox
)
from PySide6.QtCore import Signal, Qt

from ramenviz import config
from ramenviz.model.settings import VisualSettings

# Sliders work in integers; one step is 0.1
SLIDER_STEPS_PER_UNIT = 10


class ControlPanel(QWidget):
    # Signal emitted with a fresh VisualSettings snapshot
    settings_changed = Signal(object)

    def __init__(self, settings: VisualSettings) -> None:
        super().__init__()
        self._settings = settings

        layout = QVBoxLayout(self)

        # --- Steam Group ---
        grp_steam = QGroupBox("Steam")
        form = QFormLayout(grp_steam)

        self.slider_intensity = self._make_slider(config.INTENSITY_RANGE, settings.intensity)
        self.lbl_intensity = QLabel()
        form.addRow("Intensity:", self.slider_intensity)
        form.addRow("", self.lbl_intensity)

        self.slider_speed = self._make_slider(config.SPEED_RANGE, settings.speed)
        self.lbl_speed = QLabel()
        form.addRow("Speed:", self.slider_speed)
        form.addRow("", self.lbl_speed)

        self.spin_density = QSpinBox()
        self.spin_density.setRange(*config.DENSITY_RANGE)
        self.spin_density.setSingleStep(50)
        self.spin_density.setValue(settings.density)
        self.spin_density.setSuffix(" particles")
        form.addRow("Density:", self.spin_density)

        layout.addWidget(grp_steam)

        # --- Model Group ---
        grp_model = QGroupBox("Model")
        form_model = QFormLayout(grp_model)

        self.spin_point_size = QDoubleSpinBox()
        self.spin_point_size.setDecimals(3)
        self.spin_point_size.setRange(0.005, 0.2)
        self.spin_point_size.setSingleStep(0.005)
        self.spin_point_size.setValue(settings.point_size)
        form_model.addRow("Point size:", self.spin_point_size)

        self.chk_auto_rotate = QCheckBox("")
        self.chk_auto_rotate.setChecked(settings.auto_rotate)
        form_model.addRow("Auto rotate", self.chk_auto_rotate)

        layout.addWidget(grp_model)

        # --- Help ---
        lbl_help = QLabel("Shift + click on the ground to move the steam source.")
        lbl_help.setWordWrap(True)
        lbl_help.setStyleSheet("color: gray;")
        layout.addWidget(lbl_help)

        layout.addStretch()

        # --- Connections ---
        self.slider_intensity.valueChanged.connect(self.on_value_changed)
        self.slider_speed.valueChanged.connect(self.on_value_changed)
        self.spin_density.valueChanged.connect(self.on_value_changed)
        self.spin_point_size.valueChanged.connect(self.on_value_changed)
        self.chk_auto_rotate.toggled.connect(self.on_value_changed)

        self._update_labels()

    # --- PROPERTIES ---

    @property
    def settings(self) -> VisualSettings:
        return self._settings

    # --- SLOTS ---

    def on_value_changed(self, *_) -> None:
        self._settings = VisualSettings(
            intensity=self.slider_intensity.value() / SLIDER_STEPS_PER_UNIT,
            speed=self.slider_speed.value() / SLIDER_STEPS_PER_UNIT,
            density=self.spin_density.value(),
            auto_rotate=self.chk_auto_rotate.isChecked(),
            point_size=self.spin_point_size.value(),
        )
        self._update_labels()
        self.settings_changed.emit(self._settings)

    # --- HELPERS ---

    @staticmethod
    def _make_slider(value_range: tuple, value: float) -> QSlider:
        lo, hi = value_range
        slider = QSlider(Qt.Horizontal)
        slider.setRange(round(lo * SLIDER_STEPS_PER_UNIT), round(hi * SLIDER_STEPS_PER_UNIT))
        slider.setValue(round(value * SLIDER_STEPS_PER_UNIT))
        return slider

    def _update_labels(self) -> None:
        self.lbl_intensity.setText(f"{self._settings.intensity:.1f}")
        self.lbl_speed.setText(f"{self._settings.speed:.1f}x")
