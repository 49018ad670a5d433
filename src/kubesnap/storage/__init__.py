from .snapshot_writer import SnapshotWriter, render_line_diff, YAML, OUT, LOG, DIFF

__all__ = ["SnapshotWriter", "render_line_diff", "YAML", "OUT", "LOG", "DIFF"]
