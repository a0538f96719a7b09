#!/usr/bin/env python3
"""Binary merger over a strain-distorted grid: inspiral -> merger -> ringdown.

Each frame samples one time value, evaluates the orbit/ringdown timeline and
displaces a fixed lattice with the resulting transverse-traceless strain.
The two bodies spiral in, meet at the origin, and the grid rings down to rest.

Outputs (by default):
  - merger_grid.gif
  - merger_grid.mp4 (if imageio-ffmpeg is available or matplotlib FFMpegWriter works)

Optional:
  --save-data      per-frame CSV (t, phase, separation, h_plus, h_cross, envelope)
  --waveform-png   h_plus / h_cross / envelope panel over the whole animation
  Set environment variable FRAMES to change number of frames (default duration * fps)

Quick run:
  python merger_grid_animation.py --no-mp4 --fps 30 --progress
  python merger_grid_animation.py --merger-time 6 --duration 8 --lattice-size 28 --save-data

Dependencies:
  pip install numpy matplotlib imageio pillow imageio-ffmpeg

Notes:
  - The physical model is illustrative; not a rigorous GR simulation.
  - Strain is exaggerated by --strain-scale so the grid visibly breathes.
"""
from __future__ import annotations
import argparse, csv
import numpy as np, imageio.v2 as imageio
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection

from merger_config import (ConfigError, DEFAULT_DURATION, DEFAULT_FPS, WaveConfig,
                           add_config_arguments, config_from_args, frames_from_env)
from strain_grid import Lattice, build_frame, lattice_from_config
from strain_timeline import sample_waveform


# ---------------- CLI -----------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Binary merger strain-grid animation (inspiral, merger, ringdown)")
    parser.add_argument('--gif', dest='gif', action='store_true', help='Write GIF output (default True unless --no-gif)')
    parser.add_argument('--no-gif', dest='gif', action='store_false', help='Disable GIF output')
    parser.add_argument('--mp4', dest='mp4', action='store_true', help='Write MP4 output (default True unless --no-mp4)')
    parser.add_argument('--no-mp4', dest='mp4', action='store_false', help='Disable MP4 output')
    parser.add_argument('-o', '--output-stem', default='merger_grid', help='Output filename stem (default: %(default)s)')
    parser.add_argument('--duration', type=float, default=DEFAULT_DURATION, help='Animation length in seconds (default: %(default)s)')
    parser.add_argument('--fps', type=int, default=DEFAULT_FPS, help='Samples (frames) per second (default: %(default)s)')
    parser.add_argument('--frames', type=int, default=None, help='Override number of frames (default duration*fps or env FRAMES)')
    parser.add_argument('--width', type=float, default=6.0, help='Figure width in inches (default: %(default)s)')
    parser.add_argument('--height', type=float, default=6.0, help='Figure height in inches (default: %(default)s)')
    parser.add_argument('--dpi', type=int, default=100, help='Figure DPI (default: %(default)s)')
    parser.add_argument('--bg', default='black', help='Background face color')
    parser.add_argument('--grid-color', default='#3fa7ff', help='Grid line color')
    parser.add_argument('--grid-lw', type=float, default=0.8, help='Grid line width')
    parser.add_argument('--body-color', default='white', help='Body marker color')
    parser.add_argument('--save-data', action='store_true', help='Write CSV with per-frame metrics')
    parser.add_argument('--waveform-png', action='store_true', help='Write strain waveform panel PNG')
    parser.add_argument('--progress', action='store_true', help='Print per-frame progress messages')
    add_config_arguments(parser)
    parser.set_defaults(gif=True, mp4=True)
    return parser


def frame_times(n_frames: int, fps: int) -> np.ndarray:
    # k / fps rather than cumulative sums, so t_merge lands exactly on a frame
    return np.arange(n_frames) / float(fps)


# ---------------- Rendering -----------------
def view_extent(lattice: Lattice, cfg: WaveConfig) -> float:
    half = max(float(np.max(np.abs(lattice.X))), cfg.initial_separation)
    return 1.15*half + lattice.spacing


def render_frames(times, lattice: Lattice, cfg: WaveConfig, args) -> list:
    fig, ax = plt.subplots(figsize=(args.width, args.height), dpi=args.dpi)
    lim = view_extent(lattice, cfg)
    ax.set_aspect('equal'); ax.set_xlim(-lim, lim); ax.set_ylim(-lim, lim)
    ax.set_xticks([]); ax.set_yticks([])
    for spine in ax.spines.values():
        spine.set_visible(False)
    fig.patch.set_facecolor(args.bg); ax.set_facecolor(args.bg)
    fig.tight_layout(pad=0.4)

    grid = LineCollection([], linewidths=args.grid_lw, colors=args.grid_color)
    ax.add_collection(grid)
    bodies = ax.scatter([], [], s=60, c=args.body_color, zorder=3)
    title_color = 'white' if args.bg.lower() in ('black', 'k') else 'black'
    title = ax.set_title("", color=title_color)

    frames = []
    for k, t in enumerate(times):
        frame = build_frame(t, lattice, cfg)
        grid.set_segments(frame.segments)
        bodies.set_offsets(frame.bodies)
        title.set_text(f"{frame.phase.value.capitalize()}  t={frame.t:5.2f}s  |h|={frame.strain.amplitude:.4f}")
        fig.canvas.draw()
        rgb = np.asarray(fig.canvas.buffer_rgba())[:, :, :3].copy()
        frames.append(rgb)
        if args.progress:
            print(f"Frame {k+1}/{len(times)} t={frame.t:.3f} phase={frame.phase.value} bodies={len(frame.bodies)}")
    plt.close(fig)
    return frames


# ---------------- Data outputs -----------------
CSV_KEYS = ["frame", "t", "phase", "separation", "phase_angle", "h_plus", "h_cross", "envelope"]


def write_metrics_csv(csv_name: str, wave: dict) -> str:
    with open(csv_name, 'w', newline='') as f:
        w = csv.DictWriter(f, fieldnames=CSV_KEYS); w.writeheader()
        for i, t in enumerate(wave['t']):
            w.writerow({
                "frame": i,
                "t": f"{t:.6f}",
                "phase": wave['phase'][i],
                "separation": f"{wave['separation'][i]:.6f}",
                "phase_angle": "" if np.isnan(wave['phase_angle'][i]) else f"{wave['phase_angle'][i]:.6f}",
                "h_plus": f"{wave['h_plus'][i]:.8f}",
                "h_cross": f"{wave['h_cross'][i]:.8f}",
                "envelope": f"{wave['envelope'][i]:.8f}",
            })
    return csv_name


def save_waveform_png(png_name: str, wave: dict, cfg: WaveConfig, dpi: int = 200) -> str:
    t = wave['t']
    fig, axs = plt.subplots(2, 1, figsize=(8, 5), sharex=True)
    axs[0].plot(t, wave['h_plus'], lw=1.1, label='h_plus')
    axs[0].plot(t, wave['h_cross'], lw=1.1, alpha=0.7, label='h_cross')
    axs[0].plot(t, wave['envelope'], 'k--', lw=0.9, label='|h|')
    axs[0].plot(t, -wave['envelope'], 'k--', lw=0.9)
    axs[0].axvline(cfg.merger_time, color='red', lw=1.0, alpha=0.5)
    axs[0].set_ylabel('strain'); axs[0].legend(loc='upper left', fontsize=8)
    axs[1].plot(t, wave['separation'], lw=1.3)
    axs[1].axhline(cfg.min_separation, color='gray', lw=0.8, ls=':')
    axs[1].axvline(cfg.merger_time, color='red', lw=1.0, alpha=0.5)
    axs[1].set_ylabel('separation r'); axs[1].set_xlabel('t (s)')
    axs[0].set_title("Inspiral -> merger -> ringdown strain")
    plt.tight_layout(); plt.savefig(png_name, dpi=dpi); plt.close(fig)
    return png_name


# ---------------- Animation outputs -----------------
def write_gif(gif_name: str, frames: list, fps: int) -> None:
    # imageio's pillow writer deprecated fps; use duration (ms per frame).
    duration_ms = max(1, int(round(1000.0 / max(1, fps))))
    try:
        imageio.mimsave(gif_name, frames, duration=duration_ms)
        print(f"Saved GIF: {gif_name} (duration per frame {duration_ms} ms ~ {fps} fps)")
    except TypeError:
        imageio.mimsave(gif_name, frames, fps=fps)
        print(f"Saved GIF (legacy fps path): {gif_name}")


def write_mp4(mp4_name: str, frames: list, fps: int, width: float, height: float) -> bool:
    try:
        with imageio.get_writer(mp4_name, fps=fps, codec='libx264', quality=8) as w:
            for f in frames:
                w.append_data(f)
        print(f"Saved MP4 (imageio-ffmpeg): {mp4_name}")
        return True
    except Exception as e:
        print(f"(imageio-ffmpeg path failed: {e}) Trying matplotlib FFMpegWriter...")
    try:
        from matplotlib.animation import FFMpegWriter
        writer = FFMpegWriter(fps=fps)
        fig, ax = plt.subplots(figsize=(width, height))
        im = ax.imshow(frames[0])
        ax.axis('off')
        with writer.saving(fig, mp4_name, dpi=100):
            for f in frames:
                im.set_data(f)
                writer.grab_frame()
        plt.close(fig)
        print(f"Saved MP4 (matplotlib FFMpegWriter): {mp4_name}")
        return True
    except Exception as e2:
        print(f"ERROR: Unable to write MP4: {e2}")
        print("Install imageio-ffmpeg or a system ffmpeg binary.")
        return False


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.fps <= 0:
        parser.error("--fps must be > 0")
    if args.duration <= 0:
        parser.error("--duration must be > 0")
    if args.frames is not None and args.frames <= 0:
        parser.error("--frames must be > 0")
    try:
        cfg = config_from_args(args)
    except ConfigError as e:
        parser.error(str(e))

    n_frames = frames_from_env(args.frames, args.duration, args.fps)
    times = frame_times(n_frames, args.fps)
    lattice = lattice_from_config(cfg)

    if args.save_data or args.waveform_png:
        wave = sample_waveform(times, cfg)
        if args.save_data:
            print(f"Saved: {write_metrics_csv(f'{args.output_stem}_metrics.csv', wave)}")
        if args.waveform_png:
            print(f"Saved: {save_waveform_png(f'{args.output_stem}_waveform.png', wave, cfg)}")

    if not (args.gif or args.mp4):
        print("No animation outputs requested. Use --gif and/or --mp4.")
        print("Done.")
        return 0

    frames = render_frames(times, lattice, cfg, args)
    if args.gif:
        write_gif(f"{args.output_stem}.gif", frames, args.fps)
    if args.mp4:
        write_mp4(f"{args.output_stem}.mp4", frames, args.fps, args.width, args.height)

    print("Done.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
