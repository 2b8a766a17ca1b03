import logging
from datetime import date, datetime
from decimal import Decimal

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_migrate import Migrate
from sqlalchemy import func, or_
from sqlalchemy.orm import joinedload
from werkzeug.exceptions import HTTPException

from config import get_config
from constants import (
    UNITS, UNIT_LABELS, BASE_UNITS, DEFAULT_CMV_THRESHOLDS,
    SETTING_EXCELLENT_MAX, SETTING_GOOD_MAX, SETTING_MONTHLY_TARGET,
    VALID_STATUS_FILTERS, MAX_QUANTITY, MAX_PRICE, MAX_PORTIONS, MAX_PREP_TIME,
    MIN_MARGIN, MAX_MARGIN, MIN_NAME_LENGTH, MAX_LENGTHS, DEFAULT_CATEGORY_COLOR,
    QUANTITY_PLACES, PRICE_PLACES, MONEY_PLACES, MARGIN_PLACES,
)
from models import (
    db, Category, Supplier, Product, Recipe, RecipeIngredient,
    Purchase, PurchaseItem, Settings,
)
from services import (
    CostError, ProductInUse, ProductNotFound, IngredientLine, RecipeInput,
    CmvThresholds, normalize_unit, parse_decimal, safe_int, rollup,
    format_currency, format_percentage,
)
from services.formatting import decimal_str, quantize_for_storage
from services.purchases import PurchaseLine, record_purchase
from services.recalc import (
    compute_breakdown, product_needs_refresh, recipe_needs_refresh,
    recipes_using_product, refresh_dependent_recipes, refresh_recipe_cost,
    session_product_lookup,
)
from services.reports import cmv_report, purchase_summary, recipe_cmv
from utils import sanitize_color, sanitize_name, sanitize_text

logger = logging.getLogger(__name__)

migrate = Migrate()
bp = Blueprint('cmv', __name__)


class ValidationError(Exception):
    """Request payload failed validation."""

    def __init__(self, message, field=None, status=400):
        super().__init__(message)
        self.message = message
        self.field = field
        self.status = status


# ============================================
# APPLICATION FACTORY
# ============================================

def configure_logging(app):
    level_name = str(app.config.get('LOG_LEVEL', 'INFO')).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s [%(name)s] %(message)s')
    logging.getLogger().setLevel(level)
    app.logger.setLevel(level)


def create_app(config_name=None):
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))
    configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    app.register_blueprint(bp)

    app.logger.info("CMV Control started (thresholds %s/%s, strict inactive=%s)",
                    app.config['CMV_EXCELLENT_MAX'], app.config['CMV_GOOD_MAX'],
                    app.config['STRICT_INACTIVE_PRODUCTS'])
    return app


# ============================================
# ERROR HANDLERS
# ============================================

@bp.app_errorhandler(CostError)
def handle_cost_error(error):
    db.session.rollback()
    status = 409 if isinstance(error, ProductInUse) else 422
    logger.warning("Costing failed: %s %s", error.kind, error.message)
    return jsonify(error.to_dict()), status


@bp.app_errorhandler(ValidationError)
def handle_validation_error(error):
    db.session.rollback()
    body = {'error': 'ValidationError', 'message': error.message}
    if error.field:
        body['field'] = error.field
    return jsonify(body), error.status


@bp.app_errorhandler(HTTPException)
def handle_http_error(error):
    return jsonify({'error': error.name, 'message': error.description}), error.code


# ============================================
# REQUEST HELPERS
# ============================================

def get_payload():
    """JSON body, falling back to form fields."""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        raise ValidationError('Request body must be an object')
    return data


def require_name(data, key, max_length):
    name = sanitize_name(data.get(key), max_length=max_length)
    if len(name) < MIN_NAME_LENGTH:
        raise ValidationError(f'{key} must have at least {MIN_NAME_LENGTH} characters', field=key)
    return name


def optional_decimal(data, key, min_val=None, max_val=None, places=None):
    """
    Parse an optional number. ``places`` is the scale of the column the value
    is stored in; finer input is rejected rather than silently rounded.
    """
    value = data.get(key)
    if value is None or value == '':
        return None
    result = parse_decimal(value, min_val=min_val, max_val=max_val)
    if result is None:
        raise ValidationError(f'Invalid value for {key}: {value!r}', field=key)
    if places is not None and result != result.quantize(Decimal(1).scaleb(-places)):
        raise ValidationError(f'{key} allows at most {places} decimal places', field=key)
    return result


def require_decimal(data, key, min_val=None, max_val=None, places=None):
    result = optional_decimal(data, key, min_val=min_val, max_val=max_val, places=places)
    if result is None:
        raise ValidationError(f'{key} is required', field=key)
    return result


def require_positive(data, key, max_val=MAX_QUANTITY, places=QUANTITY_PLACES):
    result = require_decimal(data, key, min_val=0, max_val=max_val, places=places)
    if result <= 0:
        raise ValidationError(f'{key} must be greater than zero', field=key)
    return result


def optional_stock(data, key):
    return optional_decimal(data, key, min_val=0, max_val=MAX_QUANTITY, places=QUANTITY_PLACES)


def optional_int(data, key, min_val=None, max_val=None, default=None):
    value = data.get(key)
    if value is None or value == '':
        return default
    result = safe_int(value, min_val=min_val, max_val=max_val)
    if result is None:
        raise ValidationError(f'Invalid value for {key}: {value!r}', field=key)
    return result


def optional_bool(data, key, default=None):
    value = data.get(key)
    if value is None or value == '':
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ('1', 'true', 'yes', 'on'):
        return True
    if text in ('0', 'false', 'no', 'off'):
        return False
    raise ValidationError(f'Invalid value for {key}: {value!r}', field=key)


def optional_fk(data, key, model):
    value = data.get(key)
    if value is None or value == '':
        return None
    pk = safe_int(value, min_val=1)
    if pk is None or db.session.get(model, pk) is None:
        raise ValidationError(f'{key} does not exist', field=key)
    return pk


def parse_date(value, field):
    if value is None or value == '':
        return date.today()
    try:
        return datetime.strptime(str(value), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f'{field} must be YYYY-MM-DD', field=field) from None


def optional_date(data, key):
    value = data.get(key)
    if value is None or value == '':
        return None
    return parse_date(value, key)


def parse_month(value):
    """'2026-10' -> (2026, 10); None when absent."""
    if not value:
        return None
    try:
        parsed = datetime.strptime(value, '%Y-%m')
    except ValueError:
        raise ValidationError('month must be YYYY-MM', field='month') from None
    return parsed.year, parsed.month


def month_bounds(month):
    year, month_number = month
    start = date(year, month_number, 1)
    end = date(year + 1, 1, 1) if month_number == 12 else date(year, month_number + 1, 1)
    return start, end


def status_filter():
    status = request.args.get('status', 'active')
    if status not in VALID_STATUS_FILTERS:
        raise ValidationError(f'status must be one of {sorted(VALID_STATUS_FILTERS)}', field='status')
    return status


def low_stock_clause():
    # Mirrors Product.low_stock
    return Product.current_stock <= Product.minimum_stock


def current_thresholds():
    """Settings-table thresholds, falling back to the app config."""
    return CmvThresholds.from_mapping({
        'excellentMax': Settings.get_value(SETTING_EXCELLENT_MAX, current_app.config['CMV_EXCELLENT_MAX']),
        'goodMax': Settings.get_value(SETTING_GOOD_MAX, current_app.config['CMV_GOOD_MAX']),
    })


def current_target():
    value = Settings.get_value(SETTING_MONTHLY_TARGET, current_app.config['CMV_MONTHLY_TARGET'])
    return parse_decimal(value, default=parse_decimal(current_app.config['CMV_MONTHLY_TARGET']))


def strict_inactive():
    return bool(current_app.config.get('STRICT_INACTIVE_PRODUCTS'))


def currency():
    return current_app.config.get('CURRENCY', 'BRL')


# ============================================
# SERIALIZERS
# ============================================

def category_to_dict(category):
    return {
        'id': category.id,
        'name': category.name,
        'color': category.color,
        'description': category.description,
        'active': category.active,
    }


def supplier_to_dict(supplier):
    return {
        'id': supplier.id,
        'name': supplier.name,
        'contact': supplier.contact,
        'email': supplier.email,
        'phone': supplier.phone,
        'address': supplier.address,
        'cnpj': supplier.cnpj,
        'notes': supplier.notes,
        'active': supplier.active,
    }


def product_to_dict(product):
    return {
        'id': product.id,
        'name': product.name,
        'description': product.description,
        'internal_code': product.internal_code,
        'category_id': product.category_id,
        'supplier_id': product.supplier_id,
        'unit': product.unit,
        'unit_price': decimal_str(product.unit_price),
        'unit_price_display': f'{format_currency(product.unit_price, currency())}/{product.unit}',
        'average_cost': decimal_str(product.average_cost),
        'current_stock': decimal_str(product.current_stock),
        'minimum_stock': decimal_str(product.minimum_stock),
        'low_stock': product.low_stock,
        'expiry_date': product.expiry_date.isoformat() if product.expiry_date else None,
        'active': product.active,
    }


def breakdown_to_dict(breakdown):
    money = currency()
    return {
        # Rounded the same way as the stored recipe.total_cost
        'total_cost': decimal_str(quantize_for_storage(breakdown.total_cost)),
        'cost_per_portion': decimal_str(breakdown.cost_per_portion, 4),
        'effective_sale_price': decimal_str(breakdown.effective_sale_price, 2),
        'gross_margin': decimal_str(breakdown.gross_margin, 2),
        'cmv_percentage': decimal_str(breakdown.cmv_percentage, 2),
        'classification': breakdown.classification,
        'inactive_product_ids': list(breakdown.inactive_product_ids),
        'lines': [
            {
                'product_id': line.product_id,
                'product_name': line.product_name,
                'quantity': decimal_str(line.quantity),
                'unit': line.unit,
                'priced_unit': line.priced_unit,
                'cost': decimal_str(line.cost, 4),
                'cost_display': format_currency(line.cost, money),
                'note': line.note,
            }
            for line in breakdown.lines
        ],
        'display': {
            'total_cost': format_currency(breakdown.total_cost, money),
            'cost_per_portion': format_currency(breakdown.cost_per_portion, money),
            'effective_sale_price': format_currency(breakdown.effective_sale_price, money),
            'gross_margin': format_currency(breakdown.gross_margin, money),
            'cmv_percentage': format_percentage(breakdown.cmv_percentage),
        },
    }


def recipe_to_dict(recipe, breakdown=None, error=None, include_lines=True):
    data = {
        'id': recipe.id,
        'name': recipe.name,
        'description': recipe.description,
        'category': recipe.category,
        'prep_time': recipe.prep_time,
        'portions': recipe.portions,
        'desired_margin': decimal_str(recipe.desired_margin),
        'suggested_sale_price': decimal_str(recipe.suggested_sale_price),
        'total_cost': decimal_str(recipe.total_cost),
        'version': recipe.version,
        'active': recipe.active,
    }
    if include_lines:
        data['ingredients'] = [
            {
                'id': ri.id,
                'product_id': ri.product_id,
                'quantity': decimal_str(ri.quantity),
                'unit': ri.unit,
                'note': ri.note,
                'position': ri.position,
            }
            for ri in recipe.ingredients
        ]
    if breakdown is not None:
        data['breakdown'] = breakdown_to_dict(breakdown)
    if error is not None:
        data['cost_error'] = error.to_dict()
    return data


def purchase_to_dict(purchase, include_items=True):
    data = {
        'id': purchase.id,
        'supplier_id': purchase.supplier_id,
        'purchase_date': purchase.purchase_date.isoformat(),
        'invoice_number': purchase.invoice_number,
        'total_value': decimal_str(purchase.total_value, 2),
        'discount': decimal_str(purchase.discount, 2),
        'taxes': decimal_str(purchase.taxes, 2),
        'notes': purchase.notes,
        'total_display': format_currency(purchase.total_value, currency()),
    }
    if include_items:
        data['items'] = [
            {
                'id': item.id,
                'product_id': item.product_id,
                'product_name': item.product.name if item.product else None,
                'unit': item.product.unit if item.product else None,
                'quantity': decimal_str(item.quantity),
                'unit_price': decimal_str(item.unit_price),
                'subtotal': decimal_str(item.subtotal, 2),
            }
            for item in purchase.items
        ]
    return data


# ============================================
# ROUTES - HOME
# ============================================

@bp.route('/')
def index():
    return jsonify({
        'app': 'CMV Control',
        'status': 'ok',
        'units': {unit: {'dimension': dim, 'factor': str(factor), 'label': UNIT_LABELS.get(unit)}
                  for unit, (dim, factor) in UNITS.items()},
        'base_units': BASE_UNITS,
    })


# ============================================
# ROUTES - CATEGORIES & SUPPLIERS
# ============================================

@bp.route('/categories', methods=['GET', 'POST'])
def categories():
    if request.method == 'POST':
        data = get_payload()
        name = require_name(data, 'name', MAX_LENGTHS['category_name'])
        if Category.query.filter(func.lower(Category.name) == name.lower()).first():
            raise ValidationError(f'Category "{name}" already exists', field='name', status=409)
        category = Category(
            name=name,
            color=sanitize_color(data.get('color'), DEFAULT_CATEGORY_COLOR),
            description=sanitize_text(data.get('description'), MAX_LENGTHS['description']),
            active=optional_bool(data, 'active', True),
        )
        db.session.add(category)
        db.session.commit()
        return jsonify(category_to_dict(category)), 201

    rows = Category.query.order_by(Category.name).all()
    return jsonify([category_to_dict(c) for c in rows])


@bp.route('/suppliers', methods=['GET', 'POST'])
def suppliers():
    if request.method == 'POST':
        data = get_payload()
        supplier = Supplier(
            name=require_name(data, 'name', MAX_LENGTHS['supplier_name']),
            contact=sanitize_text(data.get('contact'), MAX_LENGTHS['contact']),
            email=sanitize_text(data.get('email'), MAX_LENGTHS['contact']),
            phone=sanitize_text(data.get('phone'), 30),
            address=sanitize_text(data.get('address'), 200),
            cnpj=sanitize_text(data.get('cnpj'), 18),
            notes=sanitize_text(data.get('notes'), MAX_LENGTHS['description']),
            active=optional_bool(data, 'active', True),
        )
        db.session.add(supplier)
        db.session.commit()
        return jsonify(supplier_to_dict(supplier)), 201

    rows = Supplier.query.order_by(Supplier.name).all()
    return jsonify([supplier_to_dict(s) for s in rows])


# ============================================
# ROUTES - PRODUCTS
# ============================================

@bp.route('/products')
def products_list():
    query = Product.query
    status = status_filter()
    if status == 'active':
        query = query.filter(Product.active.is_(True))
    elif status == 'inactive':
        query = query.filter(Product.active.is_(False))

    search = request.args.get('search', '').strip()
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(Product.name.ilike(pattern), Product.internal_code.ilike(pattern)))

    category_id = safe_int(request.args.get('category_id'), min_val=1)
    if category_id:
        query = query.filter(Product.category_id == category_id)

    supplier_id = safe_int(request.args.get('supplier_id'), min_val=1)
    if supplier_id:
        query = query.filter(Product.supplier_id == supplier_id)

    if optional_bool(request.args, 'low_stock', False):
        query = query.filter(low_stock_clause())

    return jsonify([product_to_dict(p) for p in query.order_by(Product.name).all()])


@bp.route('/product/<int:id>')
def product_view(id):
    product = db.get_or_404(Product, id)
    data = product_to_dict(product)
    data['used_by_recipes'] = [
        {'id': r.id, 'name': r.name} for r in recipes_using_product(db.session, product.id)
    ]
    return jsonify(data)


@bp.route('/product/add', methods=['POST'])
def product_add():
    data = get_payload()
    product = Product(
        name=require_name(data, 'name', MAX_LENGTHS['product_name']),
        description=sanitize_text(data.get('description'), MAX_LENGTHS['description']),
        internal_code=sanitize_text(data.get('internal_code'), MAX_LENGTHS['internal_code']),
        category_id=optional_fk(data, 'category_id', Category),
        supplier_id=optional_fk(data, 'supplier_id', Supplier),
        unit=normalize_unit(data.get('unit') or 'un'),
        unit_price=require_decimal(data, 'unit_price', min_val=0, max_val=MAX_PRICE,
                                   places=PRICE_PLACES),
        current_stock=optional_stock(data, 'current_stock') or 0,
        minimum_stock=optional_stock(data, 'minimum_stock') or 0,
        expiry_date=optional_date(data, 'expiry_date'),
        active=optional_bool(data, 'active', True),
    )
    db.session.add(product)
    db.session.commit()
    logger.info("Product created id=%s name=%s", product.id, product.name)
    return jsonify(product_to_dict(product)), 201


@bp.route('/product/<int:id>/edit', methods=['POST'])
def product_edit(id):
    product = db.get_or_404(Product, id)
    data = get_payload()

    updates = {}
    if 'name' in data:
        updates['name'] = require_name(data, 'name', MAX_LENGTHS['product_name'])
    if 'description' in data:
        updates['description'] = sanitize_text(data.get('description'), MAX_LENGTHS['description'])
    if 'internal_code' in data:
        updates['internal_code'] = sanitize_text(data.get('internal_code'), MAX_LENGTHS['internal_code'])
    if 'category_id' in data:
        updates['category_id'] = optional_fk(data, 'category_id', Category)
    if 'supplier_id' in data:
        updates['supplier_id'] = optional_fk(data, 'supplier_id', Supplier)
    if 'unit' in data:
        updates['unit'] = normalize_unit(data.get('unit'))
    if 'unit_price' in data:
        updates['unit_price'] = require_decimal(data, 'unit_price', min_val=0, max_val=MAX_PRICE,
                                                places=PRICE_PLACES)
    for field in ('current_stock', 'minimum_stock'):
        if field in data:
            updates[field] = optional_stock(data, field) or 0
    if 'expiry_date' in data:
        updates['expiry_date'] = optional_date(data, 'expiry_date')
    if 'active' in data:
        updates['active'] = optional_bool(data, 'active', product.active)

    changed = set()
    for field, value in updates.items():
        if getattr(product, field) != value:
            setattr(product, field, value)
            changed.add(field)

    refreshed = []
    if product_needs_refresh(changed):
        refreshed = refresh_dependent_recipes(product, db.session, strict_inactive=strict_inactive())
    db.session.commit()

    if changed:
        logger.info("Product id=%s updated fields=%s, %d recipe(s) recomputed",
                    product.id, sorted(changed), len(refreshed))
    result = product_to_dict(product)
    result['recomputed_recipe_ids'] = [r.id for r in refreshed]
    return jsonify(result)


@bp.route('/product/<int:id>/delete', methods=['POST'])
def product_delete(id):
    product = db.get_or_404(Product, id)

    recipes = recipes_using_product(db.session, product.id)
    if recipes:
        raise ProductInUse(product.id, [r.name for r in recipes])
    if PurchaseItem.query.filter_by(product_id=product.id).first():
        raise ValidationError('Product has purchase history; deactivate it instead', status=409)

    db.session.delete(product)
    db.session.commit()
    logger.info("Product deleted id=%s", id)
    return jsonify({'deleted': id})


# ============================================
# ROUTES - RECIPES
# ============================================

def parse_ingredient(raw, index):
    """Validate one ingredient payload into (product, quantity, unit, note)."""
    if not isinstance(raw, dict):
        raise ValidationError(f'ingredients[{index}] must be an object', field='ingredients')
    product_id = safe_int(raw.get('product_id'), min_val=1)
    if product_id is None:
        raise ValidationError(f'ingredients[{index}].product_id is required', field='ingredients')
    product = db.session.get(Product, product_id)
    if product is None:
        raise ProductNotFound(product_id)
    quantity = require_positive(raw, 'quantity')
    unit = normalize_unit(raw.get('unit') or product.unit)
    note = sanitize_text(raw.get('note'), MAX_LENGTHS['note'])
    return product, quantity, unit, note


def parse_ingredients(data, required=True):
    raw = data.get('ingredients')
    if raw is None:
        if required:
            raise ValidationError('Recipe must have at least 1 ingredient', field='ingredients')
        return []
    if not isinstance(raw, list):
        raise ValidationError('ingredients must be a list', field='ingredients')
    if required and not raw:
        raise ValidationError('Recipe must have at least 1 ingredient', field='ingredients')
    return [parse_ingredient(item, index) for index, item in enumerate(raw)]


def parse_recipe_fields(data, partial=False):
    fields = {}
    if not partial or 'name' in data:
        fields['name'] = require_name(data, 'name', MAX_LENGTHS['recipe_name'])
    if not partial or 'description' in data:
        fields['description'] = sanitize_text(data.get('description'), MAX_LENGTHS['description'])
    if not partial or 'category' in data:
        fields['category'] = sanitize_name(data.get('category'), MAX_LENGTHS['category_name'])
    if not partial or 'prep_time' in data:
        fields['prep_time'] = optional_int(data, 'prep_time', min_val=1, max_val=MAX_PREP_TIME)
    if not partial or 'portions' in data:
        fields['portions'] = optional_int(data, 'portions', min_val=1, max_val=MAX_PORTIONS, default=1)
    if not partial or 'desired_margin' in data:
        fields['desired_margin'] = optional_decimal(
            data, 'desired_margin', min_val=MIN_MARGIN, max_val=MAX_MARGIN, places=MARGIN_PLACES)
    if not partial or 'suggested_sale_price' in data:
        fields['suggested_sale_price'] = optional_decimal(
            data, 'suggested_sale_price', min_val=0, max_val=MAX_PRICE, places=MONEY_PLACES)
    if not partial or 'active' in data:
        fields['active'] = optional_bool(data, 'active', True)
    return fields


def recipe_query():
    return Recipe.query.options(joinedload(Recipe.ingredients))


@bp.route('/recipes')
def recipes_list():
    query = recipe_query()
    status = status_filter()
    if status == 'active':
        query = query.filter(Recipe.active.is_(True))
    elif status == 'inactive':
        query = query.filter(Recipe.active.is_(False))

    search = request.args.get('search', '').strip()
    if search:
        query = query.filter(Recipe.name.ilike(f'%{search}%'))
    category = sanitize_name(request.args.get('category'), MAX_LENGTHS['category_name'])
    if category:
        query = query.filter(Recipe.category == category)

    thresholds = current_thresholds()
    lookup = session_product_lookup(db.session)
    results = []
    for recipe in query.order_by(Recipe.name).all():
        try:
            breakdown = rollup(recipe.to_costing_input(), lookup, thresholds=thresholds,
                               strict_inactive=strict_inactive())
            results.append(recipe_to_dict(recipe, breakdown=breakdown, include_lines=False))
        except CostError as error:
            results.append(recipe_to_dict(recipe, error=error, include_lines=False))
    return jsonify(results)


@bp.route('/recipe/<int:id>')
def recipe_view(id):
    recipe = recipe_query().filter(Recipe.id == id).first_or_404()
    breakdown = compute_breakdown(recipe, db.session, thresholds=current_thresholds(),
                                  strict_inactive=strict_inactive())
    return jsonify(recipe_to_dict(recipe, breakdown=breakdown))


@bp.route('/recipe/preview', methods=['POST'])
def recipe_preview():
    """Cost a recipe payload without saving it."""
    data = get_payload()
    ingredients = parse_ingredients(data, required=False)
    fields = parse_recipe_fields({**data, 'name': data.get('name') or 'Preview'})
    recipe_input = RecipeInput(
        name=fields['name'],
        lines=tuple(IngredientLine(product.id, quantity, unit, note or None)
                    for product, quantity, unit, note in ingredients),
        portions=fields['portions'],
        desired_margin=fields['desired_margin'],
        suggested_sale_price=fields['suggested_sale_price'],
    )
    breakdown = rollup(recipe_input, session_product_lookup(db.session),
                       thresholds=current_thresholds(), strict_inactive=strict_inactive())
    return jsonify(breakdown_to_dict(breakdown))


def set_ingredients(recipe, ingredients):
    recipe.ingredients.clear()
    for position, (product, quantity, unit, note) in enumerate(ingredients):
        recipe.ingredients.append(RecipeIngredient(
            product_id=product.id, quantity=quantity, unit=unit, note=note, position=position,
        ))


@bp.route('/recipe/add', methods=['POST'])
def recipe_add():
    data = get_payload()
    fields = parse_recipe_fields(data)
    ingredients = parse_ingredients(data)

    recipe = Recipe(**fields)
    set_ingredients(recipe, ingredients)
    db.session.add(recipe)

    breakdown = refresh_recipe_cost(recipe, db.session, thresholds=current_thresholds(),
                                    strict_inactive=strict_inactive())
    db.session.commit()
    logger.info("Recipe created id=%s name=%s", recipe.id, recipe.name)
    return jsonify(recipe_to_dict(recipe, breakdown=breakdown)), 201


@bp.route('/recipe/<int:id>/edit', methods=['POST'])
def recipe_edit(id):
    recipe = recipe_query().filter(Recipe.id == id).first_or_404()
    data = get_payload()
    fields = parse_recipe_fields(data, partial=True)
    lines_changed = 'ingredients' in data
    ingredients = parse_ingredients(data) if lines_changed else None

    changed = set()
    for field, value in fields.items():
        if getattr(recipe, field) != value:
            setattr(recipe, field, value)
            changed.add(field)
    if lines_changed:
        set_ingredients(recipe, ingredients)

    if changed or lines_changed:
        recipe.version = (recipe.version or 1) + 1
    breakdown = None
    if recipe_needs_refresh(changed, lines_changed=lines_changed):
        breakdown = refresh_recipe_cost(recipe, db.session, thresholds=current_thresholds(),
                                        strict_inactive=strict_inactive())
    db.session.commit()

    if breakdown is None:
        # Edit saved; a costing failure here belongs to the read, not the write
        try:
            breakdown = compute_breakdown(recipe, db.session, thresholds=current_thresholds(),
                                          strict_inactive=strict_inactive())
        except CostError as error:
            return jsonify(recipe_to_dict(recipe, error=error))
    return jsonify(recipe_to_dict(recipe, breakdown=breakdown))


@bp.route('/recipe/<int:id>/delete', methods=['POST'])
def recipe_delete(id):
    recipe = db.get_or_404(Recipe, id)
    db.session.delete(recipe)
    db.session.commit()
    logger.info("Recipe deleted id=%s", id)
    return jsonify({'deleted': id})


@bp.route('/recipe/<int:id>/ingredient/add', methods=['POST'])
def recipe_ingredient_add(id):
    recipe = recipe_query().filter(Recipe.id == id).first_or_404()
    product, quantity, unit, note = parse_ingredient(get_payload(), len(recipe.ingredients))

    position = max((ri.position for ri in recipe.ingredients), default=-1) + 1
    recipe.ingredients.append(RecipeIngredient(
        product_id=product.id, quantity=quantity, unit=unit, note=note, position=position,
    ))
    recipe.version = (recipe.version or 1) + 1

    refresh_recipe_cost(recipe, db.session, strict_inactive=strict_inactive())
    db.session.commit()
    return jsonify(recipe_to_dict(recipe)), 201


def get_recipe_line(recipe, ri_id):
    for ri in recipe.ingredients:
        if ri.id == ri_id:
            return ri
    raise ValidationError(f'Ingredient {ri_id} not found in recipe {recipe.id}', status=404)


@bp.route('/recipe/<int:recipe_id>/ingredient/<int:ri_id>/update', methods=['POST'])
def recipe_ingredient_update(recipe_id, ri_id):
    recipe = recipe_query().filter(Recipe.id == recipe_id).first_or_404()
    ri = get_recipe_line(recipe, ri_id)
    data = get_payload()

    merged = {
        'product_id': data.get('product_id', ri.product_id),
        'quantity': data.get('quantity', ri.quantity),
        'unit': data.get('unit', ri.unit),
        'note': data.get('note', ri.note),
    }
    product, quantity, unit, note = parse_ingredient(merged, ri.position)
    ri.product_id = product.id
    ri.product = product
    ri.quantity = quantity
    ri.unit = unit
    ri.note = note
    recipe.version = (recipe.version or 1) + 1

    refresh_recipe_cost(recipe, db.session, strict_inactive=strict_inactive())
    db.session.commit()
    return jsonify(recipe_to_dict(recipe))


@bp.route('/recipe/<int:recipe_id>/ingredient/<int:ri_id>/delete', methods=['POST'])
def recipe_ingredient_delete(recipe_id, ri_id):
    recipe = recipe_query().filter(Recipe.id == recipe_id).first_or_404()
    ri = get_recipe_line(recipe, ri_id)
    if len(recipe.ingredients) == 1:
        raise ValidationError('Recipe must have at least 1 ingredient', field='ingredients')

    recipe.ingredients.remove(ri)
    recipe.version = (recipe.version or 1) + 1

    refresh_recipe_cost(recipe, db.session, strict_inactive=strict_inactive())
    db.session.commit()
    return jsonify(recipe_to_dict(recipe))


# ============================================
# ROUTES - PURCHASES
# ============================================

@bp.route('/purchases')
def purchases_list():
    query = Purchase.query.options(joinedload(Purchase.items).joinedload(PurchaseItem.product))
    month = parse_month(request.args.get('month'))
    if month is not None:
        start, end = month_bounds(month)
        query = query.filter(Purchase.purchase_date >= start, Purchase.purchase_date < end)
    supplier_id = safe_int(request.args.get('supplier_id'), min_val=1)
    if supplier_id:
        query = query.filter(Purchase.supplier_id == supplier_id)

    rows = query.order_by(Purchase.purchase_date.desc(), Purchase.id.desc()).all()
    return jsonify([purchase_to_dict(p, include_items=False) for p in rows])


@bp.route('/purchase/<int:id>')
def purchase_view(id):
    purchase = db.get_or_404(Purchase, id)
    return jsonify(purchase_to_dict(purchase))


@bp.route('/purchase/add', methods=['POST'])
def purchase_add():
    data = get_payload()
    raw_items = data.get('items')
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError('Purchase must have at least 1 item', field='items')

    lines = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ValidationError(f'items[{index}] must be an object', field='items')
        product_id = safe_int(raw.get('product_id'), min_val=1)
        if product_id is None:
            raise ValidationError(f'items[{index}].product_id is required', field='items')
        lines.append(PurchaseLine(
            product_id=product_id,
            quantity=require_positive(raw, 'quantity'),
            unit_price=require_decimal(raw, 'unit_price', min_val=0, max_val=MAX_PRICE,
                                       places=PRICE_PLACES),
        ))

    purchase = record_purchase(
        db.session,
        purchase_date=parse_date(data.get('purchase_date'), 'purchase_date'),
        lines=lines,
        supplier_id=optional_fk(data, 'supplier_id', Supplier),
        invoice_number=sanitize_text(data.get('invoice_number'), MAX_LENGTHS['invoice_number']),
        discount=optional_decimal(data, 'discount', min_val=0, max_val=MAX_PRICE,
                                  places=MONEY_PLACES) or 0,
        taxes=optional_decimal(data, 'taxes', min_val=0, max_val=MAX_PRICE,
                               places=MONEY_PLACES) or 0,
        notes=sanitize_text(data.get('notes'), MAX_LENGTHS['description']),
        update_prices=optional_bool(data, 'update_prices', True),
    )
    db.session.commit()
    return jsonify(purchase_to_dict(purchase)), 201


# ============================================
# ROUTES - REPORTS
# ============================================

def collect_cmv_report(query, thresholds):
    """Cost every recipe in ``query`` and aggregate; failures land in ``errors``."""
    lookup = session_product_lookup(db.session)
    rows, errors = [], []
    for recipe in query.order_by(Recipe.name).all():
        try:
            breakdown = rollup(recipe.to_costing_input(), lookup, thresholds=thresholds,
                               strict_inactive=strict_inactive())
        except CostError as error:
            logger.warning("Recipe id=%s left out of CMV report: %s", recipe.id, error.kind)
            errors.append({'recipe_id': recipe.id, 'name': recipe.name, **error.to_dict()})
            continue
        rows.append(recipe_cmv(recipe.id, recipe.name, breakdown))
    return cmv_report(rows, target=current_target(), errors=errors)


@bp.route('/reports/cmv')
def report_cmv():
    query = recipe_query()
    status = status_filter()
    if status == 'active':
        query = query.filter(Recipe.active.is_(True))
    elif status == 'inactive':
        query = query.filter(Recipe.active.is_(False))

    thresholds = current_thresholds()
    report = collect_cmv_report(query, thresholds)
    money = currency()

    def row_to_dict(row):
        if row is None:
            return None
        return {
            'recipe_id': row.recipe_id,
            'name': row.name,
            'total_cost': decimal_str(row.total_cost, 2),
            'sale_price': decimal_str(row.sale_price, 2),
            'gross_margin': decimal_str(row.gross_margin, 2),
            'cmv_percentage': decimal_str(row.cmv_percentage, 2),
            'classification': row.classification,
        }

    return jsonify({
        'recipe_count': report.recipe_count,
        'computable_count': report.computable_count,
        'total_cost': decimal_str(report.total_cost, 2),
        'total_sale_price': decimal_str(report.total_sale_price, 2),
        'gross_margin': decimal_str(report.gross_margin, 2),
        'average_cmv': decimal_str(report.average_cmv, 2),
        'weighted_cmv': decimal_str(report.weighted_cmv, 2),
        'target_cmv': decimal_str(report.target_cmv, 2),
        'thresholds': {key: str(value) for key, value in thresholds.to_mapping().items()},
        'best': row_to_dict(report.best),
        'worst': row_to_dict(report.worst),
        'by_classification': report.by_classification,
        'above_target': [row_to_dict(row) for row in report.above_target],
        'recipes': [row_to_dict(row) for row in report.rows],
        'errors': list(report.errors),
        'display': {
            'total_cost': format_currency(report.total_cost, money),
            'gross_margin': format_currency(report.gross_margin, money),
            'average_cmv': format_percentage(report.average_cmv),
            'weighted_cmv': format_percentage(report.weighted_cmv),
            'target_cmv': format_percentage(report.target_cmv),
        },
    })


@bp.route('/reports/purchases')
def report_purchases():
    month = parse_month(request.args.get('month'))
    if month is None:
        today = date.today()
        month = (today.year, today.month)
    purchases = Purchase.query.options(
        joinedload(Purchase.items).joinedload(PurchaseItem.product)
    ).all()
    summary = purchase_summary(purchases, month=month)
    money = currency()
    return jsonify({
        'purchase_count': summary.purchase_count,
        'total_value': decimal_str(summary.total_value, 2),
        'month': f'{month[0]:04d}-{month[1]:02d}',
        'month_value': decimal_str(summary.month_value, 2),
        'top_products': [
            {
                'product_id': entry['product_id'],
                'name': entry['name'],
                'quantity': decimal_str(entry['quantity']),
                'spend': decimal_str(entry['spend'], 2),
            }
            for entry in summary.top_products
        ],
        'display': {
            'total_value': format_currency(summary.total_value, money),
            'month_value': format_currency(summary.month_value, money),
        },
    })


# ============================================
# ROUTES - DASHBOARD
# ============================================

@bp.route('/dashboard/stats')
def dashboard_stats():
    month = parse_month(request.args.get('month'))
    if month is None:
        today = date.today()
        month = (today.year, today.month)
    start, end = month_bounds(month)

    active_products = Product.query.filter(Product.active.is_(True))
    low_stock = active_products.filter(low_stock_clause()).order_by(Product.name).all()
    purchases = Purchase.query.filter(
        Purchase.purchase_date >= start, Purchase.purchase_date < end
    ).all()
    summary = purchase_summary(purchases, month=month)

    active_recipes = recipe_query().filter(Recipe.active.is_(True))
    report = collect_cmv_report(active_recipes, current_thresholds())
    money = currency()

    return jsonify({
        'total_products': active_products.count(),
        'total_recipes': Recipe.query.filter(Recipe.active.is_(True)).count(),
        'monthly_purchase_count': summary.purchase_count,
        'month': f'{month[0]:04d}-{month[1]:02d}',
        'monthly_purchases': decimal_str(summary.month_value, 2),
        'average_cmv': decimal_str(report.average_cmv, 2),
        'target_cmv': decimal_str(report.target_cmv, 2),
        'low_stock_count': len(low_stock),
        'low_stock_products': [
            {
                'id': product.id,
                'name': product.name,
                'unit': product.unit,
                'current_stock': decimal_str(product.current_stock),
                'minimum_stock': decimal_str(product.minimum_stock),
            }
            for product in low_stock
        ],
        'errors': list(report.errors),
        'display': {
            'monthly_purchases': format_currency(summary.month_value, money),
            'average_cmv': format_percentage(report.average_cmv),
            'target_cmv': format_percentage(report.target_cmv),
        },
    })


# ============================================
# ROUTES - SETTINGS
# ============================================

@bp.route('/settings/cmv', methods=['GET', 'POST'])
def settings_cmv():
    if request.method == 'POST':
        data = get_payload()
        existing = current_thresholds()
        try:
            thresholds = CmvThresholds.from_mapping({
                'excellentMax': data.get('excellentMax', existing.excellent_max),
                'goodMax': data.get('goodMax', existing.good_max),
            })
        except ValueError as e:
            raise ValidationError(str(e), field='thresholds') from None

        Settings.set_value(SETTING_EXCELLENT_MAX, thresholds.excellent_max)
        Settings.set_value(SETTING_GOOD_MAX, thresholds.good_max)
        if 'monthly_target' in data:
            target = require_decimal(data, 'monthly_target', min_val=0, max_val=100)
            Settings.set_value(SETTING_MONTHLY_TARGET, target)
        db.session.commit()
        logger.info("CMV settings updated: %s", thresholds.to_mapping())

    thresholds = current_thresholds()
    return jsonify({
        'thresholds': {key: str(value) for key, value in thresholds.to_mapping().items()},
        'defaults': {key: str(value) for key, value in DEFAULT_CMV_THRESHOLDS.items()},
        'monthly_target': str(current_target()),
    })
