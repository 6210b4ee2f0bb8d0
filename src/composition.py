"""
Composition
Builds both unit pairs in a fixed order
"""
from config import Config
from src.app import App
from src.decoupling import select_table_source
from src.order_service import define_order_service
from src.references import ByName
from src.user_service import define_config_based_user_service, define_user_service


def build_app(config: Config) -> App:
    """Define every unit; nothing is created until a unit is deployed"""
    app = App(config.organization, config.project)
    tags = config.common_tags

    # 1. Direct-reference pair
    user_service = define_user_service(
        app, "UserService",
        table_name=config.users_table_name,
        tags=tags,
    )
    users_table = select_table_source(
        config.decoupling_phase,
        user_service["users_table"],
        aws_region=config.aws_region,
        global_indexes=tuple(config.index_names),
        lookup=config.lookup_table,
    )
    define_order_service(
        app, "OrderService", users_table,
        function_settings=config.function_settings,
        tags=tags,
    )

    # 2. Configuration-based pair, linked only by the table name
    config_based = define_config_based_user_service(
        app, "ConfigBasedUserService",
        table_name=config.config_based_table_name,
        tags=tags,
    )
    define_order_service(
        app, "ConfigBasedOrderService",
        ByName(
            config_based["users_table_name"],
            aws_region=config.aws_region,
            global_indexes=tuple(config.index_names),
            lookup=config.lookup_table,
        ),
        function_settings=config.function_settings,
        tags=tags,
    )

    return app
