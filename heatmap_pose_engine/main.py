# heatmap_pose_engine/main.py
import argparse
import cv2
import logging
import time
import numpy as np
from collections import deque

from heatmap_pose.camera.camera_manager import CameraManager
from heatmap_pose.common.config import load_config
from heatmap_pose.common.errors import ConfigError
from heatmap_pose.inference.engine import OpenCVDnnEngine
from heatmap_pose.processing.estimators import create_estimator
from heatmap_pose.processing.pose_processor import PoseProcessor, PoseWorker
from heatmap_pose.visualization.visualizer import Visualizer

logger = logging.getLogger("heatmap_pose")

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Live heatmap-based pose estimation.")
    parser.add_argument("--config", default="config.yaml", help="Path to the YAML configuration file")
    parser.add_argument("--headless", action="store_true", help="Decode without opening a window")
    return parser.parse_args(argv)

def main(argv=None):
    """
    The main application loop.
    Capture runs on the camera thread, decoding on the pose worker thread and
    rendering here; frames arriving while a decode is in flight are dropped.
    """
    args = parse_args(argv)
    try:
        config = load_config(args.config)
    except ConfigError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error("%s", e)
        return 1

    logging.basicConfig(
        level=config.log_level.value,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    fps_history = deque(maxlen=100)
    processor = None

    try:
        engine = OpenCVDnnEngine(
            config.model.path,
            config.model.input_size,
            grayscale=config.model.grayscale,
            normalized=config.model.normalized,
            layout=config.model.layout,
        )
        processor = PoseProcessor(
            create_estimator(config.model.kind, engine),
            preprocess_options=config.pose.preprocess_options(),
            postprocess_options=config.pose.postprocess_options(),
        )
        visualizer = Visualizer(config.visualization)

        with CameraManager(config.camera) as camera, PoseWorker(processor) as worker:
            last_frame_time = time.perf_counter()
            while camera.is_running():
                frame, metadata = camera.get_frame()
                if frame is None:
                    time.sleep(0.001) # Wait briefly if no frame is available
                    continue

                worker.submit(frame, metadata)
                result = worker.latest_result()

                now = time.perf_counter()
                latency = now - last_frame_time
                last_frame_time = now
                fps_history.append(1.0 / latency if latency > 0 else 0)
                avg_fps = float(np.mean(fps_history))

                if result is None or args.headless:
                    continue

                output_frame = visualizer.render(frame, result, avg_fps)
                cv2.imshow(config.visualization.window_name, output_frame)
                if cv2.waitKey(1) & 0xFF == ord('q'):
                    logger.info("Shutdown signal received.")
                    break

            logger.info("Camera stats: %s", camera.get_stats())

    except IOError as e:
        logger.error("Failed to initialize. %s", e)
        return 1
    finally:
        if processor is not None:
            processor.close()
        if not args.headless:
            cv2.destroyAllWindows()
        logger.info("Application terminated.")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
