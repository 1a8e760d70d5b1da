"""Built-in sample catalog.

Loaded by Catalog.default() when no CPQ_CATALOG_PATH is configured. The shape
matches the Catalog model, so a JSON file with the same structure can replace it.
"""

ROOM_TYPES = ["Kitchen", "Bathroom", "Laundry Room", "Pantry", "Wet Bar"]

CUSTOMERS = [
    {"id": "cust_01", "name": "John Smith Construction"},
    {"id": "cust_02", "name": "Elite Kitchen Designs"},
    {"id": "cust_03", "name": "Mike Johnson (Homeowner)"},
    {"id": "cust_04", "name": "Premier Remodeling Co"},
    {"id": "cust_05", "name": "Sarah Wilson (Homeowner)"},
]

STYLES = [
    {"id": "mod_traditional_oak", "name": "Traditional Oak", "description": "Classic raised panel oak cabinetry", "category": "traditional"},
    {"id": "mod_modern_euro", "name": "Modern Euro", "description": "Sleek flat panel European style", "category": "modern"},
    {"id": "mod_shaker_white", "name": "Shaker White", "description": "Timeless shaker style in white", "category": "transitional"},
    {"id": "mod_contemporary_walnut", "name": "Contemporary Walnut", "description": "Rich walnut with clean lines", "category": "modern"},
    {"id": "mod_farmhouse_gray", "name": "Farmhouse Gray", "description": "Rustic farmhouse style in gray", "category": "traditional"},
    {"id": "mod_industrial_black", "name": "Industrial Black", "description": "Bold industrial design in black", "category": "modern"},
    {"id": "mod_classic_cherry", "name": "Classic Cherry", "description": "Elegant cherry wood traditional", "category": "traditional"},
    {"id": "mod_minimalist_white", "name": "Minimalist White", "description": "Ultra-clean minimalist design", "category": "modern"},
    {"id": "mod_transitional_maple", "name": "Transitional Maple", "description": "Versatile maple transitional style", "category": "transitional"},
    {"id": "mod_luxury_mahogany", "name": "Luxury Mahogany", "description": "Premium mahogany with ornate details", "category": "traditional"},
]


def _product(
    id,
    style_id,
    name,
    category,
    sub_category,
    base_price,
    unit="each",
    dimensions=None,
    in_stock=True,
    lead_time_days=14,
    description="",
):
    return {
        "id": id,
        "style_id": style_id,
        "name": name,
        "category": category,
        "sub_category": sub_category,
        "base_price": base_price,
        "unit": unit,
        "dimensions": dimensions,
        "in_stock": in_stock,
        "lead_time_days": lead_time_days,
        "description": description,
    }


def _dims(width, height, depth):
    return {"width": width, "height": height, "depth": depth}


OAK = "mod_traditional_oak"
EURO = "mod_modern_euro"

PRODUCTS = [
    # Traditional Oak base cabinets
    _product("prod_trad_oak_base_12", OAK, '12" Base Cabinet', "cabinet", "base", "285", dimensions=_dims(12, 34.5, 24), description='Standard 12" base cabinet with raised panel door'),
    _product("prod_trad_oak_base_15", OAK, '15" Base Cabinet', "cabinet", "base", "315", dimensions=_dims(15, 34.5, 24), description='Standard 15" base cabinet with raised panel door'),
    _product("prod_trad_oak_base_18", OAK, '18" Base Cabinet', "cabinet", "base", "345", dimensions=_dims(18, 34.5, 24), in_stock=False, lead_time_days=21, description='Standard 18" base cabinet with raised panel door'),
    _product("prod_trad_oak_base_21", OAK, '21" Base Cabinet', "cabinet", "base", "375", dimensions=_dims(21, 34.5, 24), description='Standard 21" base cabinet with raised panel door'),
    _product("prod_trad_oak_base_24", OAK, '24" Base Cabinet', "cabinet", "base", "395", dimensions=_dims(24, 34.5, 24), description='Standard 24" base cabinet with raised panel door'),
    # Traditional Oak wall cabinets
    _product("prod_trad_oak_wall_12", OAK, '12" Wall Cabinet', "cabinet", "wall", "225", dimensions=_dims(12, 30, 12), description='Standard 12" wall cabinet with raised panel door'),
    _product("prod_trad_oak_wall_15", OAK, '15" Wall Cabinet', "cabinet", "wall", "245", dimensions=_dims(15, 30, 12), description='Standard 15" wall cabinet with raised panel door'),
    _product("prod_trad_oak_wall_18", OAK, '18" Wall Cabinet', "cabinet", "wall", "265", dimensions=_dims(18, 30, 12), in_stock=False, lead_time_days=28, description='Standard 18" wall cabinet with raised panel door'),
    # Specialty
    _product("prod_trad_oak_pantry_24", OAK, '24" Pantry Cabinet', "cabinet", "pantry", "685", dimensions=_dims(24, 84, 24), lead_time_days=21, description="Full height pantry cabinet with adjustable shelves"),
    _product("prod_trad_oak_corner_36", OAK, '36" Corner Base', "cabinet", "corner", "485", dimensions=_dims(36, 34.5, 24), in_stock=False, lead_time_days=35, description="Corner base cabinet with lazy susan option"),
    # Hardware
    _product("prod_trad_oak_knob_bronze", OAK, "Bronze Cabinet Knob", "hardware", "knob", "8.50", lead_time_days=3, description="Oil-rubbed bronze cabinet knob"),
    _product("prod_trad_oak_pull_bronze", OAK, "Bronze Cabinet Pull", "hardware", "pull", "12.75", lead_time_days=3, description='4" oil-rubbed bronze cabinet pull'),
    _product("prod_trad_oak_hinge_euro", OAK, "European Hinge", "hardware", "hinge", "4.25", lead_time_days=7, description="Soft-close European hinge"),
    # Countertops
    _product("prod_quartz_carrara", OAK, "Carrara Quartz", "countertop", "quartz", "65", unit="sqft", description="White quartz with gray veining"),
    _product("prod_granite_black", OAK, "Black Granite", "countertop", "granite", "55", unit="sqft", lead_time_days=21, description="Absolute black granite"),
    # Modern Euro
    _product("prod_mod_euro_base_12", EURO, '12" Euro Base', "cabinet", "base", "325", dimensions=_dims(12, 34.5, 24), lead_time_days=10, description="Handleless European base cabinet"),
    _product("prod_mod_euro_base_18", EURO, '18" Euro Base', "cabinet", "base", "385", dimensions=_dims(18, 34.5, 24), lead_time_days=10, description="Handleless European base cabinet"),
    _product("prod_mod_euro_wall_12", EURO, '12" Euro Wall', "cabinet", "wall", "275", dimensions=_dims(12, 30, 12), lead_time_days=10, description="Handleless European wall cabinet"),
    _product("prod_mod_euro_push_open", EURO, "Push-to-Open Hardware", "hardware", "mechanism", "15.50", lead_time_days=7, description="Push-to-open mechanism for handleless cabinets"),
    _product("prod_mod_euro_led_strip", EURO, "LED Under-Cabinet Strip", "hardware", "lighting", "25.00", unit="linft", lead_time_days=5, description="Integrated LED strip lighting"),
    # Appliances
    _product("prod_appliance_dishwasher", OAK, "Built-in Dishwasher", "appliance", "dishwasher", "895", dimensions=_dims(24, 34, 24), lead_time_days=7, description="Stainless steel built-in dishwasher"),
    _product("prod_appliance_range", OAK, "Gas Range", "appliance", "range", "1285", dimensions=_dims(30, 36, 25), in_stock=False, description='30" gas range with convection oven'),
    # Accessories
    _product("prod_acc_lazy_susan", OAK, "Lazy Susan", "accessory", "organizer", "85", lead_time_days=7, description="Two-tier lazy susan for corner cabinets"),
    _product("prod_acc_drawer_slides", OAK, "Soft-Close Drawer Slides", "accessory", "slide", "22", lead_time_days=3, description="Full extension soft-close drawer slides"),
]


def _processing(id, name, kind, category, pricing_type, price, categories, description="", options=None):
    return {
        "id": id,
        "name": name,
        "kind": kind,
        "description": description,
        "category": category,
        "pricing_type": pricing_type,
        "price": price,
        "applicable_product_categories": categories,
        "options": options or [],
    }


PROCESSINGS = [
    # Fabrication
    _processing(
        "proc_cut_to_size", "Cut to Size", "Cut-to-Size", "fabrication", "per_unit", "45", ["cabinet"],
        description="Custom cut cabinet to specified dimensions",
        options=[
            {
                "id": "custom_dimensions",
                "name": "Custom Dimensions",
                "type": "dimensions",
                "required": True,
                "description": "Enter the custom dimensions for cutting",
                "dimension_fields": ["width", "height", "depth"],
                "default_value": {"width": 24, "height": 34.5, "depth": 24},
            },
            {
                "id": "cut_precision",
                "name": "Cut Precision",
                "type": "select",
                "required": False,
                "description": "Select the precision level for cutting",
                "choices": [
                    {"value": "standard", "label": 'Standard (±1/8")', "price_modifier": "0"},
                    {"value": "precise", "label": 'Precise (±1/16")', "price_modifier": "10"},
                    {"value": "exact", "label": 'Exact (±1/32")', "price_modifier": "20"},
                ],
                "default_value": "standard",
            },
        ],
    ),
    _processing("proc_notch_plumbing", "Plumbing Notch", "Notch", "fabrication", "per_unit", "25", ["cabinet"], description="Cut notch for plumbing access"),
    _processing("proc_drill_holes", "Drill Custom Holes", "Drilling", "fabrication", "per_unit", "15", ["cabinet", "door"], description="Drill holes for specific hardware placement"),
    # Finishing
    _processing(
        "proc_stain_dark", "Dark Stain", "Stain", "finishing", "percentage", "0.15", ["cabinet", "door"],
        description="Apply dark walnut stain finish",
        options=[
            {
                "id": "stain_color",
                "name": "Stain Color",
                "type": "select",
                "required": True,
                "description": "Choose the stain color",
                "choices": [
                    {"value": "walnut", "label": "Dark Walnut", "price_modifier": "0"},
                    {"value": "cherry", "label": "Cherry", "price_modifier": "0.02"},
                    {"value": "mahogany", "label": "Mahogany", "price_modifier": "0.03"},
                    {"value": "ebony", "label": "Ebony", "price_modifier": "0.01"},
                ],
            }
        ],
    ),
    _processing("proc_stain_medium", "Medium Stain", "Stain", "finishing", "percentage", "0.10", ["cabinet", "door"], description="Apply medium oak stain finish"),
    _processing("proc_paint_white", "White Paint", "Paint", "finishing", "percentage", "0.20", ["cabinet", "door"], description="Custom white paint finish"),
    _processing(
        "proc_paint_custom", "Custom Paint Color", "Paint", "finishing", "percentage", "0.25", ["cabinet", "door"],
        description="Custom color paint finish",
        options=[
            {
                "id": "paint_color",
                "name": "Paint Color",
                "type": "color",
                "required": True,
                "description": "Select the paint color",
                "color_palette": ["#FFFFFF", "#F5F5F5", "#E5E5E5", "#D3D3D3", "#A9A9A9", "#808080", "#696969", "#2F4F4F", "#000000"],
                "default_value": "#FFFFFF",
            },
            {
                "id": "paint_finish",
                "name": "Paint Finish",
                "type": "select",
                "required": True,
                "description": "Choose the paint finish type",
                "choices": [
                    {"value": "matte", "label": "Matte", "price_modifier": "0"},
                    {"value": "satin", "label": "Satin", "price_modifier": "0.01"},
                    {"value": "semi_gloss", "label": "Semi-Gloss", "price_modifier": "0.02"},
                    {"value": "high_gloss", "label": "High-Gloss", "price_modifier": "0.03"},
                ],
            },
        ],
    ),
    # Hardware installation
    _processing("proc_install_knobs", "Install Knobs", "Hardware", "hardware_install", "per_unit", "8", ["cabinet"], description="Install cabinet knobs"),
    _processing("proc_install_pulls", "Install Pulls", "Hardware", "hardware_install", "per_unit", "12", ["cabinet"], description="Install cabinet pulls"),
    _processing("proc_install_push_open", "Install Push-Open", "Hardware", "hardware_install", "per_unit", "35", ["cabinet"], description="Install push-to-open mechanism"),
    # Countertops
    _processing("proc_edge_bullnose", "Bullnose Edge", "Edge Profile", "countertop_edge", "per_dimension", "8", ["countertop"], description="Rounded bullnose edge profile"),
    _processing("proc_edge_beveled", "Beveled Edge", "Edge Profile", "countertop_edge", "per_dimension", "12", ["countertop"], description="Angled beveled edge profile"),
    _processing("proc_undermount_sink", "Undermount Sink Cutout", "Cutout", "countertop_cutout", "per_unit", "125", ["countertop"], description="Cut and polish undermount sink opening"),
    _processing("proc_cooktop_cutout", "Cooktop Cutout", "Cutout", "countertop_cutout", "per_unit", "85", ["countertop"], description="Cut opening for cooktop installation"),
    # Upgrades
    _processing("proc_soft_close_hinges", "Soft-Close Hinges", "Upgrade", "upgrade", "per_unit", "18", ["cabinet"], description="Upgrade to soft-close hinges"),
    _processing("proc_full_ext_slides", "Full Extension Slides", "Upgrade", "upgrade", "per_unit", "28", ["cabinet"], description="Upgrade to full extension drawer slides"),
    _processing("proc_lazy_susan_install", "Lazy Susan Installation", "Mechanism", "mechanism", "per_unit", "65", ["cabinet"], description="Install lazy susan mechanism"),
    # Door options
    _processing("proc_glass_door", "Glass Door Insert", "Door Insert", "door_option", "per_unit", "75", ["cabinet"], description="Add glass insert to cabinet door"),
    _processing("proc_mesh_door", "Mesh Door Insert", "Door Insert", "door_option", "per_unit", "45", ["cabinet"], description="Add decorative mesh insert"),
    # Lighting
    _processing("proc_led_interior", "Interior LED Lighting", "Lighting", "lighting", "per_unit", "55", ["cabinet"], description="Install interior cabinet LED lighting"),
    _processing("proc_led_under_cabinet", "Under-Cabinet LED", "Lighting", "lighting", "per_dimension", "18", ["cabinet"], description="Install under-cabinet LED strip"),
]

EXCLUSION_RULES = [
    {
        "id": "rule_handle_exclusion",
        "processing_ids": ["proc_install_knobs", "proc_install_pulls"],
        "excludes": ["proc_install_push_open"],
        "description": "Cannot have push-to-open with traditional handles",
    },
    {
        "id": "rule_edge_exclusion",
        "processing_ids": ["proc_edge_bullnose"],
        "excludes": ["proc_edge_beveled"],
        "description": "Can only have one edge profile per countertop",
    },
]

DEFAULT_CATALOG = {
    "room_types": ROOM_TYPES,
    "customers": CUSTOMERS,
    "styles": STYLES,
    "products": PRODUCTS,
    "processings": PROCESSINGS,
    "exclusion_rules": EXCLUSION_RULES,
}
