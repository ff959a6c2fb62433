from salesagent.models.page_rules import PageRules
from salesagent.models.product import Product
from salesagent.models.post_link import PostLink
from salesagent.models.conversation import Conversation
from salesagent.models.order import Order
from salesagent.models.order_item import OrderItem
from salesagent.models.processed_event import ProcessedEvent
