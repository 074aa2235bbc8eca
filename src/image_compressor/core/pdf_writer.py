"""Single-page PDF container for one embedded raster image."""

import io
from dataclasses import dataclass
from typing import Optional

import pikepdf

# Soft masks need PDF 1.4
PDF_VERSION = "1.4"
IMAGE_RESOURCE_NAME = "/Im0"


@dataclass
class PdfImageStream:
    """An encoded image stream ready to be placed in an image XObject."""

    width: int
    height: int
    data: bytes
    filter_name: str
    color_space: str = "DeviceRGB"
    soft_mask: Optional["PdfImageStream"] = None


def _image_xobject(pdf: pikepdf.Pdf, image: PdfImageStream) -> pikepdf.Object:
    """Embed already-encoded samples as an indirect image XObject."""
    xobject = pikepdf.Stream(pdf, image.data)
    xobject["/Type"] = pikepdf.Name.XObject
    xobject["/Subtype"] = pikepdf.Name.Image
    xobject["/Width"] = image.width
    xobject["/Height"] = image.height
    xobject["/ColorSpace"] = pikepdf.Name("/" + image.color_space)
    xobject["/BitsPerComponent"] = 8
    xobject["/Filter"] = pikepdf.Name("/" + image.filter_name)
    if image.soft_mask is not None:
        xobject["/SMask"] = _image_xobject(pdf, image.soft_mask)
    return pdf.make_indirect(xobject)


def build_single_image_pdf(image: PdfImageStream) -> bytes:
    """
    Wrap one image stream in a single-page document.

    The page's MediaBox matches the pixel size (one pixel per point) and the
    content stream paints the image XObject over the whole page. The file ID
    is derived from the content, so identical inputs give identical bytes.
    Objects are written individually with a classic cross-reference table.
    """
    pdf = pikepdf.Pdf.new()
    image_ref = _image_xobject(pdf, image)

    content = f"q {image.width} 0 0 {image.height} 0 0 cm {IMAGE_RESOURCE_NAME} Do Q"
    page = pdf.add_blank_page(page_size=(image.width, image.height))
    page.obj["/Contents"] = pdf.make_indirect(pikepdf.Stream(pdf, content.encode("ascii")))
    page.obj["/Resources"] = pikepdf.Dictionary(
        {"/XObject": pikepdf.Dictionary({IMAGE_RESOURCE_NAME: image_ref})}
    )

    with io.BytesIO() as out:
        pdf.save(
            out,
            min_version=PDF_VERSION,
            object_stream_mode=pikepdf.ObjectStreamMode.disable,
            deterministic_id=True,
        )
        return out.getvalue()
