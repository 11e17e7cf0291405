"""
User-facing notification texts.
Spanish is the default (the fleet operators' language); English is kept for API clients.
"""

from fleet_ledger.config import settings

ENTITY_LABELS = {
    "es": {
        "vehicles": "vehículo",
        "trips": "viaje",
        "expenses": "gasto",
        "tolls": "peaje",
        "toll_records": "registro de peaje",
    },
    "en": {
        "vehicles": "vehicle",
        "trips": "trip",
        "expenses": "expense",
        "tolls": "toll",
        "toll_records": "toll record",
    },
}

MESSAGES = {
    "es": {
        "created": "{Entity} agregado correctamente",
        "updated": "{Entity} actualizado correctamente",
        "deleted": "{Entity} eliminado correctamente",
        "not_authenticated": "Usuario no autenticado",
        "invalid_data": "Datos del {entity} incompletos o inválidos: {details}",
        "not_found": "{Entity} no encontrado",
        "load_failed": "Error al cargar los datos de {entity}",
        "vehicle_missing": "El vehículo seleccionado no existe",
        "trip_missing": "El viaje seleccionado no existe",
        "toll_missing": "El peaje seleccionado no existe",
        "vehicle_mismatch": "El vehículo no coincide con el vehículo del viaje",
        "trip_vehicle_locked": "No se puede cambiar el vehículo de un viaje con gastos o registros de peaje asociados",
        "duplicate_plate": "Ya existe un vehículo con la placa {plate}",
        "duplicate_toll": "Ya existe un peaje con este nombre en esta ubicación",
        "vehicle_has_trips": "No se puede eliminar el vehículo porque tiene viajes asociados",
        "trip_has_dependents": "No se puede eliminar el viaje porque tiene gastos o registros de peaje asociados",
        "toll_has_records": "No se puede eliminar el peaje porque tiene registros asociados",
        "remote_duplicate_key": "Este registro ya existe",
        "remote_foreign_key": "Referencia inválida en los datos",
        "remote_permission_denied": "No tienes permisos para realizar esta acción",
        "remote_generic": "Error en la base de datos. Inténtalo de nuevo.",
        "export_empty": "No hay datos para exportar",
        "export_failed": "Error al exportar los datos",
        "export_done": "Datos exportados a {filename}",
    },
    "en": {
        "created": "{Entity} added successfully",
        "updated": "{Entity} updated successfully",
        "deleted": "{Entity} deleted successfully",
        "not_authenticated": "User not authenticated",
        "invalid_data": "Incomplete or invalid {entity} data: {details}",
        "not_found": "{Entity} not found",
        "load_failed": "Could not load {entity} data",
        "vehicle_missing": "The selected vehicle does not exist",
        "trip_missing": "The selected trip does not exist",
        "toll_missing": "The selected toll does not exist",
        "vehicle_mismatch": "The vehicle does not match the trip's vehicle",
        "trip_vehicle_locked": "Cannot change the vehicle of a trip that has expenses or toll records",
        "duplicate_plate": "A vehicle with plate {plate} already exists",
        "duplicate_toll": "A toll with this name already exists at this location",
        "vehicle_has_trips": "Cannot delete the vehicle because it has trips",
        "trip_has_dependents": "Cannot delete the trip because it has expenses or toll records",
        "toll_has_records": "Cannot delete the toll because it has toll records",
        "remote_duplicate_key": "This record already exists",
        "remote_foreign_key": "Invalid reference in the data",
        "remote_permission_denied": "You are not allowed to perform this action",
        "remote_generic": "Database error. Please try again.",
        "export_empty": "There is no data to export",
        "export_failed": "Could not export the data",
        "export_done": "Data exported to {filename}",
    },
}


def entity_label(table_name: str, locale: str = None) -> str:
    labels = ENTITY_LABELS.get(locale or settings.LOCALE, ENTITY_LABELS["es"])
    return labels.get(table_name, table_name)


def t(key: str, table_name: str = None, locale: str = None, **params) -> str:
    """Render message `key` in the configured locale. `table_name` fills {entity}/{Entity}."""
    catalogue = MESSAGES.get(locale or settings.LOCALE, MESSAGES["es"])
    template = catalogue.get(key, key)
    if table_name:
        label = entity_label(table_name, locale)
        params.setdefault("entity", label)
        params.setdefault("Entity", label[:1].upper() + label[1:])
    return template.format(**params)
