import numpy as np
from blinkflip.eye.blink import LEFT_EYE, RIGHT_EYE
from blinkflip.io.overlay import draw_eye_landmarks, draw_hud

def test_dots_on_eye_landmarks():
    img = np.zeros((100,200,3), np.uint8)
    pts = np.zeros((478,2), np.float32)
    pts[LEFT_EYE[0]] = [0.25, 0.5]
    pts[RIGHT_EYE[3]] = [0.75, 0.5]
    draw_eye_landmarks(img, pts)
    assert tuple(img[50,50]) == (0,255,0)
    assert tuple(img[50,150]) == (0,255,0)

def test_no_landmarks_leaves_frame():
    img = np.zeros((40,40,3), np.uint8)
    draw_eye_landmarks(img, None)
    assert not img.any()

def test_hud_text_drawn():
    img = np.zeros((60,400,3), np.uint8)
    draw_hud(img, 0.271, 0.25)
    assert img[:, :, 1].any()
    blank = np.zeros((60,400,3), np.uint8)
    draw_hud(blank, None, 0.25, face=False)
    assert blank.any()
