from __future__ import annotations
import sys
import time
import cv2
import numpy as np
from typing import Optional

from PySide6.QtWidgets import (
    QApplication, QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QCheckBox, QComboBox, QTextEdit, QMessageBox,
    QFrame, QSplitter, QSlider, QProgressBar
)
from PySide6.QtCore import QThread, Signal, QTimer, Qt
from PySide6.QtGui import QImage, QPixmap
import qdarkstyle

from ..calibrate.wizard import Calibrator
from ..fuse.rules import GestureConfig, build_state_machine
from ..io.overlay import draw_eye_landmarks
from ..runtime.tracker import EyeTracker


class EyeWorker(QThread):
    """Worker thread: camera frames through the tracker."""

    frame_ready = Signal(np.ndarray)
    gesture = Signal(str)
    calib_progress = Signal(float)
    calib_done = Signal(float)
    error_occurred = Signal(str)

    def __init__(self, camera_index: int, cfg: GestureConfig):
        super().__init__()
        self.camera_index = camera_index
        self.cfg = cfg
        self.running = False
        self.cap = None
        left, right = cfg.eyes()
        self.tracker = EyeTracker(build_state_machine(cfg), left_eye=left, right_eye=right)
        self.show_landmarks = True

    def start_capture(self):
        """Open the camera and start the loop."""
        try:
            self.cap = cv2.VideoCapture(self.camera_index)
            if not self.cap.isOpened():
                raise RuntimeError(f"Failed to open camera {self.camera_index}")
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, 640)
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, 480)
            self.running = True
            self.start()
        except Exception as e:
            self.error_occurred.emit(f"Failed to start capture: {e}")

    def stop_capture(self):
        self.running = False
        self.wait()
        if self.cap:
            self.cap.release()
            self.cap = None

    def run(self):
        while self.running:
            ret, frame = self.cap.read()
            if not ret:
                time.sleep(0.01)
                continue
            try:
                events = self.tracker.process(frame)
            except Exception as e:
                self.error_occurred.emit(f"Processing error: {e}")
                time.sleep(0.1)
                continue
            for ev in events:
                self.gesture.emit(ev.type.value)
            if self.show_landmarks:
                draw_eye_landmarks(frame, self.tracker.last_landmarks,
                                   (self.tracker.left_eye, self.tracker.right_eye))
            self.frame_ready.emit(frame)


class Preview(QLabel):
    """Camera feed, scaled to fit."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMinimumSize(640, 480)
        self.setStyleSheet("border: 1px solid gray; background-color: black;")
        self.setAlignment(Qt.AlignCenter)
        self.setText("No camera feed")

    def update_frame(self, frame: np.ndarray):
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        h, w, ch = rgb.shape
        q_image = QImage(rgb.data, w, h, ch * w, QImage.Format_RGB888)
        pixmap = QPixmap.fromImage(q_image)
        self.setPixmap(pixmap.scaled(self.size(), Qt.KeepAspectRatio, Qt.SmoothTransformation))


class BlinkFlipGUI(QMainWindow):
    """Control window: preview, sensitivity, calibration, event log."""

    def __init__(self, cfg: Optional[GestureConfig] = None):
        super().__init__()
        self.cfg = cfg or GestureConfig()
        self.worker: Optional[EyeWorker] = None
        self.calibrator: Optional[Calibrator] = None
        self.sample_timer = QTimer(self)
        self.readout_timer = QTimer(self)
        self.setup_ui()
        self.setup_connections()
        self.readout_timer.start(100)

    def setup_ui(self):
        self.setWindowTitle("BlinkFlip - Eye Gesture Control")
        self.setGeometry(100, 100, 1100, 700)

        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        main_layout = QHBoxLayout(central_widget)
        splitter = QSplitter(Qt.Horizontal)
        main_layout.addWidget(splitter)

        left_panel = QWidget()
        left_layout = QVBoxLayout(left_panel)
        self.preview = Preview()
        left_layout.addWidget(self.preview)

        controls_frame = QFrame()
        controls_frame.setFrameStyle(QFrame.StyledPanel)
        controls_layout = QVBoxLayout(controls_frame)

        button_layout = QHBoxLayout()
        self.start_btn = QPushButton("▶ Start")
        self.stop_btn = QPushButton("⏹ Stop")
        self.stop_btn.setEnabled(False)
        button_layout.addWidget(self.start_btn)
        button_layout.addWidget(self.stop_btn)
        controls_layout.addLayout(button_layout)

        calib_layout = QHBoxLayout()
        self.calibrate_btn = QPushButton("🎯 Calibrate")
        self.calibrate_btn.setEnabled(False)
        self.calib_bar = QProgressBar()
        self.calib_bar.setRange(0, 100)
        calib_layout.addWidget(self.calibrate_btn)
        calib_layout.addWidget(self.calib_bar)
        controls_layout.addLayout(calib_layout)

        slider_layout = QHBoxLayout()
        slider_layout.addWidget(QLabel("Sensitivity:"))
        self.sensitivity = QSlider(Qt.Horizontal)
        self.sensitivity.setRange(10, 40)  # hundredths of EAR
        self.sensitivity.setValue(round(self.cfg.blink_threshold * 100))
        slider_layout.addWidget(self.sensitivity)
        controls_layout.addLayout(slider_layout)

        self.landmarks_cb = QCheckBox("Show eye landmarks")
        self.landmarks_cb.setChecked(True)
        controls_layout.addWidget(self.landmarks_cb)

        self.status_label = QLabel("EAR: -.--- | THR: %.3f" % self.cfg.blink_threshold)
        self.status_label.setStyleSheet("background-color: #333; color: #4CAF50; padding: 5px; border-radius: 3px; font-weight: bold;")
        controls_layout.addWidget(self.status_label)

        camera_layout = QHBoxLayout()
        camera_layout.addWidget(QLabel("Camera:"))
        self.camera_combo = QComboBox()
        self.camera_combo.addItems([f"Camera {i}" for i in range(4)])
        camera_layout.addWidget(self.camera_combo)
        controls_layout.addLayout(camera_layout)
        left_layout.addWidget(controls_frame)

        right_panel = QWidget()
        right_layout = QVBoxLayout(right_panel)
        right_layout.addWidget(QLabel("📋 Event Log:"))
        self.event_log = QTextEdit()
        self.event_log.setReadOnly(True)
        self.event_log.setStyleSheet("background-color: #1e1e1e; color: #d4d4d4; font-family: 'Consolas', monospace; font-size: 10px;")
        right_layout.addWidget(self.event_log)

        splitter.addWidget(left_panel)
        splitter.addWidget(right_panel)
        splitter.setSizes([750, 350])

    def setup_connections(self):
        self.start_btn.clicked.connect(self.start_tracking)
        self.stop_btn.clicked.connect(self.stop_tracking)
        self.calibrate_btn.clicked.connect(self.calibrate)
        self.sensitivity.valueChanged.connect(self.set_sensitivity)
        self.landmarks_cb.toggled.connect(self.toggle_landmarks)
        self.readout_timer.timeout.connect(self.refresh_readout)
        self.sample_timer.timeout.connect(self.sample_ear)

    def start_tracking(self):
        if self.worker:
            self.worker.stop_capture()
        self.worker = EyeWorker(self.camera_combo.currentIndex(), self.cfg)
        self.worker.tracker.sm.set_threshold(self.sensitivity.value() / 100.0)
        self.worker.show_landmarks = self.landmarks_cb.isChecked()
        self.worker.frame_ready.connect(self.preview.update_frame)
        self.worker.gesture.connect(lambda g: self.log_event(f"Gesture: {g}"))
        self.worker.calib_progress.connect(self.on_calib_progress)
        self.worker.calib_done.connect(self.on_calib_done)
        self.worker.error_occurred.connect(self.handle_error)
        self.worker.start_capture()
        if self.worker is None or not self.worker.running:
            return
        self.start_btn.setEnabled(False)
        self.stop_btn.setEnabled(True)
        self.calibrate_btn.setEnabled(True)
        self.log_event("Started tracking")

    def stop_tracking(self):
        self.cancel_calibration()
        if self.worker:
            self.worker.stop_capture()
            self.worker = None
        self.start_btn.setEnabled(True)
        self.stop_btn.setEnabled(False)
        self.calibrate_btn.setEnabled(False)
        self.log_event("Stopped tracking")

    def calibrate(self):
        """Five deliberate blinks; EAR sampled every ``interval_ms`` by a QTimer."""
        if not self.worker:
            return
        c = self.cfg.calibration
        tracker = self.worker.tracker
        # callbacks run on the worker thread; signals hop back to the GUI thread
        self.calibrator = Calibrator(tracker.sm, read_ear=tracker.current_ear, blinks=c.blinks,
                                     interval_ms=c.interval_ms, offset=c.offset, ceiling=c.ceiling,
                                     on_progress=self.worker.calib_progress.emit,
                                     on_complete=self.worker.calib_done.emit)
        self.calibrator.start(autosample=False)
        self.sample_timer.start(c.interval_ms)
        self.calib_bar.setValue(0)
        self.calibrate_btn.setEnabled(False)
        self.log_event(f"Calibration: blink {c.blinks} times")

    def cancel_calibration(self):
        self.sample_timer.stop()
        if self.calibrator and self.calibrator.active:
            self.calibrator.cancel()
            self.log_event("Calibration abandoned")
        self.calibrator = None

    def sample_ear(self):
        if self.calibrator:
            self.calibrator.sample()

    def on_calib_progress(self, fraction: float):
        self.calib_bar.setValue(int(fraction * 100))

    def on_calib_done(self, threshold: float):
        self.sample_timer.stop()
        self.calibrator = None
        self.sensitivity.blockSignals(True)
        self.sensitivity.setValue(round(threshold * 100))
        self.sensitivity.blockSignals(False)
        self.calibrate_btn.setEnabled(self.worker is not None)
        self.log_event(f"Calibration complete: threshold {threshold:.3f}")

    def set_sensitivity(self, value: int):
        if self.worker:
            self.worker.tracker.sm.set_threshold(value / 100.0)

    def toggle_landmarks(self, enabled: bool):
        if self.worker:
            self.worker.show_landmarks = enabled

    def refresh_readout(self):
        if not self.worker:
            return
        tracker = self.worker.tracker
        ear = tracker.current_ear()
        ear_txt = f"{ear:.3f}" if ear is not None else "-.---"
        self.status_label.setText(f"EAR: {ear_txt} | THR: {tracker.sm.blink_threshold:.3f}")

    def handle_error(self, error_msg: str):
        self.log_event(f"Error: {error_msg}")
        if "camera" in error_msg.lower():
            QMessageBox.warning(self, "Camera Error", error_msg)
            self.stop_tracking()

    def log_event(self, message: str):
        timestamp = time.strftime("%H:%M:%S")
        self.event_log.append(f"[{timestamp}] {message}")
        lines = self.event_log.toPlainText().split('\n')
        if len(lines) > 200:
            self.event_log.setPlainText('\n'.join(lines[-200:]))

    def closeEvent(self, event):
        self.cancel_calibration()
        if self.worker:
            self.worker.stop_capture()
        event.accept()


def main(cfg: Optional[GestureConfig] = None):
    app = QApplication(sys.argv)
    app.setStyleSheet(qdarkstyle.load_stylesheet_pyside6())
    window = BlinkFlipGUI(cfg)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
