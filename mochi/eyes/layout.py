from dataclasses import dataclass


@dataclass
class Layout:
    """Base face geometry in pixels. Derived positions come from recompute()."""

    screen_width: int = 128
    screen_height: int = 64
    eye_width: int = 36
    eye_height: int = 36
    spacing: int = 10
    border_radius: int = 8
    mouth_width: int = 20
    mouth_height: int = 6

    # Derived
    center_x: int = 0
    center_y: int = 0
    left_eye_x: int = 0
    right_eye_x: int = 0
    eye_y: int = 0

    def __post_init__(self):
        self.recompute()

    def recompute(self):
        """Recalculate every derived field from the base values."""
        self.screen_width = max(1, int(self.screen_width))
        self.screen_height = max(1, int(self.screen_height))
        self.eye_width = max(1, int(self.eye_width))
        self.eye_height = max(1, int(self.eye_height))
        self.spacing = max(0, int(self.spacing))
        self.border_radius = max(0, int(self.border_radius))
        self.mouth_width = max(1, int(self.mouth_width))
        self.mouth_height = max(1, int(self.mouth_height))

        self.center_x = self.screen_width // 2
        self.center_y = self.screen_height // 2
        total_width = self.eye_width + self.spacing + self.eye_width
        self.left_eye_x = (self.screen_width - total_width) // 2
        self.right_eye_x = self.left_eye_x + self.eye_width + self.spacing
        self.eye_y = (self.screen_height - self.eye_height) // 2
