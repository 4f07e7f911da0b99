"""slidepack: write PowerPoint (PresentationML) packages from a content model."""

from .errors import (
    ErrorKind,
    PackageError,
    ConfigError,
)
from .units import (
    Dimension,
    percent,
    pixels_to_emu,
)
from .hyperlinks import Hyperlink, LinkAction
from .text import (
    Run,
    Paragraph,
    TextBody,
    TextAlign,
    Bullet,
    BulletStyle,
)
from .shapes import (
    Shape,
    ShapeType,
    GradientFill,
    GradientStop,
    GradientDirection,
    LineDash,
)
from .connectors import (
    Connector,
    ConnectorType,
    ArrowType,
    ArrowSize,
    ConnectionSite,
)
from .tables import (
    Table,
    TableCell,
    TableRow,
    CellBorder,
    CellBorders,
    CellMargins,
    CellVerticalAlign,
)
from .charts import Chart, ChartKind, Series
from .images import Image, ImageFormat
from .media import Media, MediaOptions, VideoFormat, AudioFormat
from .props import SlideShowSettings, PrintSettings, ShowType, PrintWhat, ColorMode
from .sections import SlideSection
from .slides import Slide, SlideLayout
from .presentation import Presentation, blank_presentation
from .package import Compression, PackageOptions, build_package, save_package
from .inspection import PackageSummary, inspect_package, validate_package

__version__ = "0.1.0"

__all__ = [
    # Errors
    "ErrorKind",
    "PackageError",
    "ConfigError",
    # Units
    "Dimension",
    "percent",
    "pixels_to_emu",
    # Content model
    "Hyperlink",
    "LinkAction",
    "Run",
    "Paragraph",
    "TextBody",
    "TextAlign",
    "Bullet",
    "BulletStyle",
    "Shape",
    "ShapeType",
    "GradientFill",
    "GradientStop",
    "GradientDirection",
    "LineDash",
    "Connector",
    "ConnectorType",
    "ArrowType",
    "ArrowSize",
    "ConnectionSite",
    "Table",
    "TableCell",
    "TableRow",
    "CellBorder",
    "CellBorders",
    "CellMargins",
    "CellVerticalAlign",
    "Chart",
    "ChartKind",
    "Series",
    "Image",
    "ImageFormat",
    "Media",
    "MediaOptions",
    "VideoFormat",
    "AudioFormat",
    "SlideShowSettings",
    "PrintSettings",
    "ShowType",
    "PrintWhat",
    "ColorMode",
    "SlideSection",
    "Slide",
    "SlideLayout",
    "Presentation",
    "blank_presentation",
    # Packaging
    "Compression",
    "PackageOptions",
    "build_package",
    "save_package",
    # Inspection
    "PackageSummary",
    "inspect_package",
    "validate_package",
]
