import os
import logging
import azure.functions as func

from brandgraphics.function_blueprints.batch_graphics_blueprint import bp as batch_graphics_bp
from brandgraphics.function_blueprints.generate_graphic_blueprint import bp as generate_graphic_bp
from brandgraphics.function_blueprints.list_brand_images_blueprint import bp as list_brand_images_bp

app = func.FunctionApp()


def _configure_logging() -> None:
    lvl = (os.getenv("AZURE_SDK_LOG_LEVEL") or "").upper()
    if lvl:
        level = getattr(logging, lvl, logging.INFO)
        logging.getLogger("azure").setLevel(level)
        logging.getLogger("azure.identity").setLevel(level)
    logging.getLogger("brandgraphics").setLevel(logging.INFO)


_configure_logging()

app.register_functions(generate_graphic_bp)
app.register_functions(batch_graphics_bp)
app.register_functions(list_brand_images_bp)
