import numpy as np

from facescan.config import RegionConfig
from facescan.landmarks import Landmark
from facescan.regions import Box, PixelBlock, RegionMap, bounding_box, region_centroid, sample_region


def test_region_map_from_config():
    regions = RegionMap.from_config()
    assert set(regions) == {"forehead", "left_cheek", "right_cheek", "chin", "jaw"}
    assert regions["forehead"] == (10, 297, 332, 284, 251, 21)
    assert regions.members(["forehead", "left_cheek"]) == frozenset(
        RegionConfig().forehead + RegionConfig().left_cheek
    )


def test_sample_region_matches_box(landmarks, face_frame, boxes):
    regions = RegionMap.from_config()
    block = sample_region(face_frame, landmarks, regions["left_cheek"])
    x0, y0, x1, y1 = boxes["left_cheek"]
    assert block.box == Box(x0, y0, x1, y1)
    assert block.pixels.shape == (y1 - y0, x1 - x0, 3)
    assert float(block.brightness().mean()) == 90.0


def test_sample_region_is_a_copy(landmarks, face_frame):
    regions = RegionMap.from_config()
    block = sample_region(face_frame, landmarks, regions["jaw"])
    face_frame[:] = 0
    assert int(block.pixels.min()) == 50


def test_zero_area_box_is_none():
    pts = [Landmark(10, 10), Landmark(10, 10), Landmark(10, 40)]
    assert bounding_box(pts, [0, 1], 100, 100) is None
    # zero width even though height is positive
    assert bounding_box(pts, [0, 2], 100, 100) is None


def test_box_outside_frame_is_none():
    pts = [Landmark(150, 150), Landmark(180, 190)]
    assert bounding_box(pts, [0, 1], 100, 100) is None
    frame = np.zeros((100, 100, 3), dtype=np.uint8)
    assert sample_region(frame, pts, [0, 1]) is None


def test_box_is_clamped_to_frame():
    pts = [Landmark(-20, -5), Landmark(50.5, 30.2)]
    box = bounding_box(pts, [0, 1], 40, 100)
    assert box == Box(0, 0, 40, 31)


def test_brightness_is_channel_mean():
    pixels = np.array([[[30, 60, 90], [255, 255, 255]]], dtype=np.uint8)
    block = PixelBlock(pixels=pixels, box=Box(0, 0, 2, 1))
    assert block.brightness().tolist() == [[60.0, 255.0]]
    assert block.size == 2


def test_region_centroid():
    pts = [Landmark(0, 0), Landmark(10, 0), Landmark(10, 20)]
    assert region_centroid(pts, [0, 1, 2]) == (20 / 3, 20 / 3)
