"""
Planning prompt.

The prompt gives the model the sender identity, the (truncated) email body,
the tool bundle and the rules for argument names and reference expressions,
and asks for a bare JSON array of steps.
"""

import json
from string import Template
from typing import Any

NO_INSTRUCTIONS = "No specific instructions provided."

PLANNING_PROMPT = Template(
    """You are an intent and action planner. Based on the email sender information and customer email content below, determine which external tools are needed to help answer or fulfill the request.

Email Sender Information:
---
Sender Name: $sender_name
Sender Email: $sender_email
---

Customer Email Content:
---
$email_body
---

Available Tools:
---
$tools
---

Planning Sequences and Using Outputs:
If the user's request requires multiple actions, you can plan a sequence of tool calls.
To use an output from a previous step (e.g., 'steps[0]', 'steps[1]') as an argument for a subsequent step, use the placeholder syntax: '{{steps[INDEX].outputs.FIELD_NAME}}'.
- 'INDEX' is the 0-based index of the step in the plan array whose output you want to use. It must be smaller than the index of the step using it.
- 'FIELD_NAME' is the specific field name from that step's 'output_schema'. This field name must exactly match a key present in the 'output_schema' of the tool at 'steps[INDEX]'.
The 'output_schema' provided for each tool in the "Available Tools" list shows what 'FIELD_NAME's it will return.

IMPORTANT: When constructing the "args" object for any tool:
- Only include arguments that are listed in the tool's 'args_schema_keys' for which you have a value.
- You must use the exact argument names listed in its args_schema_keys.
- You must not invent, rename, or assume alternative argument names like order_id when the schema says orderId.
- When referencing previous outputs, map the exact args_schema_keys name to a compatible field in a previous step's output_schema, even if they differ (e.g., orderId <- steps[0].outputs.id).
- Do not rename keys. Do not use snake_case instead of camelCase. Do not change anything about the argument name.

When referencing data from previous tool calls, use the exact JSON path that matches the output structure and retain the square brackets for arrays and dot notation for objects:
- If the response is an object with a field like 'orders: Order[]', use: 'steps[0].outputs.orders[0].id'
- If the response is a plain array, use: 'steps[0].outputs[0].id'

Important Instructions for Using Sender Information:
- When planning actions, especially the first action in a sequence or any action that requires identifying the customer (e.g., fetching orders, customer details), you must consider using the details from the 'Email Sender Information' section (like 'Sender Email' or 'Sender Name') as arguments if the tool accepts them.
- Even if a tool argument (like 'email' or 'customerId') is optional, if the 'Email Sender Information' provides relevant data for that argument, you should include it in the plan to ensure the action is specific and effective.
- Do not leave critical identifying arguments (like 'email' for a customer-specific lookup) as null or unprovided if the sender's information is available and directly applicable to fulfilling the user's request.

Output format constraints:
Respond ONLY with a valid JSON array. Do not add any other text before or after the array.
If no tools are needed, or if the email content does not require any actionable steps, return an empty array [].
Only use tools from the 'Available Tools' list. Ensure the tool name in your output matches exactly a name from the 'Available Tools' list.

Your entire response must be only the JSON array. Each element has the form:
{
  "tool": "<exact name from the Available Tools list>",
  "args": { "<exact key from args_schema_keys>": <value> },
  "reasoning": "<why this tool is needed and what the call should accomplish>"
}

Example of a multi-step plan using tool outputs as input values for subsequent steps:
[
  {
    "tool": "user.getCustomerByEmail",
    "args": { "email": "customer@example.com" },
    "reasoning": "To identify the customer based on the email sender information."
  },
  {
    "tool": "orders.getOrders",
    "args": { "customerId": "{{steps[0].outputs.id}}" },
    "reasoning": "To fetch the latest order for the identified customer."
  },
  {
    "tool": "shipping.getTrackingInfo",
    "args": { "orderId": "{{steps[1].outputs.id}}" },
    "reasoning": "To retrieve the tracking information for the latest order."
  }
]
"""
)


def render_planning_prompt(
    email_body: str,
    sender_email: str,
    sender_name: str,
    tools: list[dict[str, Any]],
) -> str:
    """
    Fill the planning template.

    Args:
        email_body: Email body, already truncated by the caller.
        sender_email: Sender address.
        sender_name: Sender display name.
        tools: Tool bundle entries (name, description, args_schema_keys,
            args_schema_example, output_schema).
    """
    return PLANNING_PROMPT.safe_substitute(
        sender_name=sender_name,
        sender_email=sender_email,
        email_body=email_body,
        tools=json.dumps(tools, indent=2, ensure_ascii=False),
    )
